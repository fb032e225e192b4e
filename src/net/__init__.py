"""Network utilities for HTTP requests with retry logic."""

from .network import (
    NO_RETRY,
    fetch_bytes,
    fetch_json,
    post_file,
    RetryConfig,
)

__all__ = [
    "NO_RETRY",
    "fetch_bytes",
    "fetch_json",
    "post_file",
    "RetryConfig",
]
