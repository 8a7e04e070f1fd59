"""
Tests for services/errors.py — ApiError and DRF message formatting
"""
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from services.errors import ApiError, RequestCancelled, describe_error, format_error_message

FALLBACK = "Failed to save"


class TestFormatErrorMessage:
    def test_none(self):
        assert format_error_message(None, FALLBACK) == FALLBACK

    def test_plain_string(self):
        assert format_error_message("  Server busy ", FALLBACK) == "Server busy"

    def test_blank_string(self):
        assert format_error_message("   ", FALLBACK) == FALLBACK

    def test_non_field_errors_win(self):
        body = {"non_field_errors": ["Dates overlap", "Station closed"], "x": ["y"]}
        assert format_error_message(body, FALLBACK) == "Dates overlap, Station closed"

    def test_field_errors_joined(self):
        body = {"station": ["This field is required."], "start_date": ["Invalid date.", "Too early."]}
        assert format_error_message(body, FALLBACK) == (
            "station: This field is required. — start_date: Invalid date., Too early."
        )

    def test_detail(self):
        assert format_error_message({"detail": "Invalid page."}, FALLBACK) == "Invalid page."

    def test_error_key(self):
        assert format_error_message({"error": "Bad request"}, FALLBACK) == "Bad request"

    def test_unknown_shape(self):
        assert format_error_message([1, 2], FALLBACK) == FALLBACK
        assert format_error_message({}, FALLBACK) == FALLBACK


class TestApiError:
    def test_detail_from_payload(self):
        err = ApiError("HTTP 404", status_code=404, payload={"detail": "Not found."})
        assert err.detail == "Not found."
        assert err.status_code == 404

    def test_detail_falls_back_to_message(self):
        assert ApiError("Network error").detail == "Network error"

    def test_request_cancelled_is_api_error(self):
        exc = RequestCancelled()
        assert isinstance(exc, ApiError)
        assert exc.status_code is None
        assert "cancelled" in exc.message


class TestDescribeError:
    @pytest.mark.parametrize("exc,expected", [
        (ApiError("HTTP 400", 400, {"name": ["Required."]}), "name: Required."),
        (ApiError("Request timed out after 30s"), "Request timed out after 30s"),
        (KeyError("boom"), FALLBACK),
    ])
    def test_describe(self, exc, expected):
        assert describe_error(exc, FALLBACK) == expected
