"""REST transport for the PMIS station-management API."""

from services.errors import ApiError, RequestCancelled, describe_error, format_error_message
from services.rest import PageModel, RestResource, parse_page

__all__ = [
    "ApiError",
    "PageModel",
    "RequestCancelled",
    "RestResource",
    "describe_error",
    "format_error_message",
    "parse_page",
]
