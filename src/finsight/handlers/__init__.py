"""
AWS Lambda Handlers Module.

Each resource collection is served by its own Lambda function:

- users_handler: the caller's own profile
- accounts_handler, categories_handler, transactions_handler, budgets_handler:
  ownership-scoped CRUD
- health_handler: database reachability probe

Every handler shares the resolver factory, response envelope, error taxonomy
and Powertools observability from ``finsight.handlers.utils``.
"""
