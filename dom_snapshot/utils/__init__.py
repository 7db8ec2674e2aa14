"""
Utility modules for the snapshot pipeline.

Contains logging, URL handling utilities, and constants.
"""

from .log import setup_logger, get_logger
from .urls import (
    resolve_url,
    get_origin,
    get_cross_origin_mode,
    extract_url,
    safe_encode_uri,
    to_data_url,
)
from .constants import (
    DEFAULT_USER_AGENT,
    DEFAULT_IMAGE_TIMEOUT_MS,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_PAGE_TIMEOUT,
    SANDBOX_ID,
)

__all__ = [
    "setup_logger",
    "get_logger",
    "resolve_url",
    "get_origin",
    "get_cross_origin_mode",
    "extract_url",
    "safe_encode_uri",
    "to_data_url",
    "DEFAULT_USER_AGENT",
    "DEFAULT_IMAGE_TIMEOUT_MS",
    "DEFAULT_REQUEST_TIMEOUT",
    "DEFAULT_PAGE_TIMEOUT",
    "SANDBOX_ID",
]
