"""Utility modules for the account handlers."""

from accounts.utils.logging import (
    clear_request_context,
    configure_logging,
    get_logger,
    hash_for_correlation,
    mask_email,
    mask_identifier,
    mask_pii,
    set_request_context,
)
from accounts.utils.parsers import (
    collect_query_params,
    first_param,
    get_header,
    parse_cookies,
    parse_json_body,
)
from accounts.utils.responses import error_response, json_response

__all__ = [
    "clear_request_context",
    "collect_query_params",
    "configure_logging",
    "error_response",
    "first_param",
    "get_header",
    "get_logger",
    "hash_for_correlation",
    "json_response",
    "mask_email",
    "mask_identifier",
    "mask_pii",
    "parse_cookies",
    "parse_json_body",
    "set_request_context",
]
