"""Shared utilities for the PMIS admin client and its mock API."""

# Configuration
from utils.config import Config, ClientConfig

# HTTP utilities
from utils.http import RetryStrategy, SessionManager

# Query building
from utils.query import (
    CORE_PARAM_KEYS,
    build_ordering,
    build_list_params,
    parse_ordering,
    build_where_clause,
    build_order_clause,
)

# Logging
from utils.logging_config import JsonFormatter, configure_logging

__all__ = [
    # Config
    "Config",
    "ClientConfig",
    # HTTP
    "RetryStrategy",
    "SessionManager",
    # Query
    "CORE_PARAM_KEYS",
    "build_ordering",
    "build_list_params",
    "parse_ordering",
    "build_where_clause",
    "build_order_clause",
    # Logging
    "JsonFormatter",
    "configure_logging",
]
