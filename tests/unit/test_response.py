"""Tests for the uniform JSON response shape."""

import json

from warranty_renewal.api.response import error_response, format_json_response


class TestFormatJsonResponse:
    def test_defaults(self):
        response = format_json_response()

        assert response.status_code == 200
        assert json.loads(response.body) == {"data": {}}
        assert response.headers["access-control-allow-origin"] == "*"
        assert response.headers["access-control-allow-credentials"] == "true"

    def test_wraps_payload(self):
        response = format_json_response(status_code=201, data=[{"orderId": "o-1"}])

        assert response.status_code == 201
        assert json.loads(response.body) == {"data": [{"orderId": "o-1"}]}

    def test_caller_headers_merge_and_override(self):
        response = format_json_response(
            headers={"Access-Control-Allow-Origin": "https://shop.example", "X-Trace": "t-1"},
        )

        assert response.headers["access-control-allow-origin"] == "https://shop.example"
        assert response.headers["access-control-allow-credentials"] == "true"
        assert response.headers["x-trace"] == "t-1"

    def test_error_response(self):
        response = error_response(400, "carName is missing to make the order")

        assert response.status_code == 400
        assert json.loads(response.body) == {
            "data": {"message": "carName is missing to make the order"}
        }
