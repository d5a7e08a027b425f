"""Unit tests for the response envelope."""

import json
from datetime import date, datetime, timezone
from decimal import Decimal

from finsight.handlers.utils.response import (
    CORS_HEADERS,
    build_error_response,
    build_response,
    create_api_response,
    serialize_body,
)
from finsight.models.output import MessageOutput


class TestBuildResponse:
    """Test cases for build_response."""

    def test_json_body_and_cors_headers(self):
        response = build_response(201, {"id": "abc"})

        assert response.status_code == 201
        assert json.loads(response.body) == {"id": "abc"}
        assert response.headers["Content-Type"] == "application/json"
        for name, value in CORS_HEADERS.items():
            assert response.headers[name] == value

    def test_extra_headers_merged(self):
        response = build_response(201, {}, headers={"Location": "/accounts/abc"})

        assert response.headers["Location"] == "/accounts/abc"
        assert response.headers["Access-Control-Allow-Origin"] == "*"

    def test_empty_list_serializes_as_array(self):
        response = build_response(200, [])

        assert response.body == "[]"

    def test_error_response_shape(self):
        response = build_error_response(404, "Account not found")

        assert response.status_code == 404
        assert json.loads(response.body) == {"error": "Account not found"}
        assert response.headers["Access-Control-Allow-Methods"] == "GET,POST,PUT,DELETE,OPTIONS"


class TestSerializeBody:
    """Models, dates and decimals all serialize to plain JSON."""

    def test_models_in_list(self):
        body = serialize_body([MessageOutput(message="a"), MessageOutput(message="b")])

        assert json.loads(body) == [{"message": "a"}, {"message": "b"}]

    def test_dates_and_decimals(self):
        body = serialize_body({
            "day": date(2024, 3, 1),
            "at": datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc),
            "amount": Decimal("12.50"),
        })

        assert json.loads(body) == {
            "day": "2024-03-01",
            "at": "2024-03-01T12:00:00+00:00",
            "amount": 12.5,
        }


class TestCreateApiResponse:
    """Raw proxy responses carry the same envelope."""

    def test_dict_body(self):
        response = create_api_response(500, {"error": "Internal server error"})

        assert response["statusCode"] == 500
        assert json.loads(response["body"]) == {"error": "Internal server error"}
        assert response["headers"]["Content-Type"] == "application/json"
        assert response["headers"]["Access-Control-Allow-Headers"] == "Content-Type,Authorization"
        assert response["isBase64Encoded"] is False

    def test_string_body_passed_through(self):
        response = create_api_response(200, '{"ok": true}')

        assert response["body"] == '{"ok": true}'
