"""
FinSight API.

Personal-finance backend served by one AWS Lambda function per resource
collection. The package follows a three-layer layout:

- handlers: API Gateway entry points, routing and response envelopes
- dal: PostgreSQL data access scoped by row ownership
- models: Pydantic domain, request and response models
- security: credential resolution from AWS Secrets Manager
"""

__version__ = "1.0.0"
