"""Centralized network utilities with retry logic and exponential backoff.

This module provides HTTP request handling for fragment downloads, the
holiday service and the grayscale conversion service:
- Optional retries with exponential backoff
- Jitter to prevent thundering herd
- Non-2xx responses raised as NetworkError with the response detail
"""

import random
import time
from dataclasses import dataclass
from typing import Any, Optional

import requests

from errors import NetworkError

USER_AGENT = "PlannerPress/1.0"


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""

    max_retries: int = 3
    base_delay: float = 0.5  # seconds
    max_delay: float = 30.0  # seconds
    exponential_base: float = 2.0
    jitter: bool = True
    retry_on_429: bool = True  # Rate limit errors
    retry_on_5xx: bool = True  # Server errors
    timeout: int = 30  # seconds

    def get_delay(self, attempt: int) -> float:
        """Calculate delay for given attempt with exponential backoff and jitter."""
        delay = min(self.base_delay * (self.exponential_base**attempt), self.max_delay)

        if self.jitter:
            delay += random.uniform(0, delay * 0.5)

        return delay


# Default configuration
DEFAULT_CONFIG = RetryConfig()

# Single attempt, used where the caller owns the failure policy
NO_RETRY = RetryConfig(max_retries=1)


def _should_retry(status: int, config: RetryConfig, attempt: int) -> bool:
    if attempt >= config.max_retries - 1:
        return False
    if status == 429:
        return config.retry_on_429
    if 500 <= status < 600:
        return config.retry_on_5xx
    return False


def _response_detail(response: requests.Response) -> str:
    try:
        return response.text.strip()
    except (UnicodeDecodeError, requests.RequestException):
        return ""


def _request(
    method: str,
    url: str,
    *,
    config: RetryConfig,
    headers: Optional[dict[str, str]] = None,
    **kwargs: Any,
) -> requests.Response:
    request_headers = {"User-Agent": USER_AGENT}
    if headers:
        request_headers.update(headers)

    last_error: Optional[Exception] = None

    for attempt in range(config.max_retries):
        try:
            response = requests.request(
                method, url, headers=request_headers, timeout=config.timeout, **kwargs
            )
        except requests.RequestException as error:
            last_error = error
            if attempt < config.max_retries - 1:
                time.sleep(config.get_delay(attempt))
                continue
            break

        if response.ok:
            return response

        detail = _response_detail(response)
        last_error = NetworkError(
            f"{method} {url} failed with HTTP {response.status_code}"
            + (f": {detail}" if detail else ""),
            status_code=response.status_code,
            detail=detail,
        )

        if _should_retry(response.status_code, config, attempt):
            time.sleep(config.get_delay(attempt))
            continue
        break

    if isinstance(last_error, NetworkError):
        raise last_error
    if last_error is not None:
        raise NetworkError(f"{method} {url} failed: {last_error}") from last_error

    raise NetworkError(f"Failed to {method} {url} after {config.max_retries} attempts")


def fetch_bytes(
    url: str,
    *,
    headers: Optional[dict[str, str]] = None,
    config: Optional[RetryConfig] = None,
) -> bytes:
    """Fetch URL content as bytes with retry logic.

    Args:
        url: URL to fetch
        headers: Optional HTTP headers
        config: Retry configuration (uses default if None)

    Returns:
        Response body as bytes

    Raises:
        NetworkError: If all attempts fail
    """
    response = _request("GET", url, config=config or DEFAULT_CONFIG, headers=headers)
    return response.content


def fetch_json(
    url: str,
    *,
    params: Optional[dict[str, Any]] = None,
    headers: Optional[dict[str, str]] = None,
    config: Optional[RetryConfig] = None,
) -> Any:
    """Fetch URL content as JSON with retry logic.

    Raises:
        NetworkError: If all attempts fail or the body is not valid JSON
    """
    response = _request(
        "GET",
        url,
        config=config or DEFAULT_CONFIG,
        headers={"Accept": "application/json", **(headers or {})},
        params=params,
    )
    try:
        return response.json()
    except ValueError as error:
        raise NetworkError(f"Invalid JSON from {url}: {error}") from error


def post_file(
    url: str,
    payload: bytes,
    *,
    filename: str = "document.pdf",
    content_type: str = "application/pdf",
    headers: Optional[dict[str, str]] = None,
    config: Optional[RetryConfig] = None,
) -> bytes:
    """Upload a file as multipart form data (field name ``file``).

    Returns:
        Response body as bytes

    Raises:
        NetworkError: If the upload fails or the server answers non-2xx
    """
    response = _request(
        "POST",
        url,
        config=config or NO_RETRY,
        headers=headers,
        files={"file": (filename, payload, content_type)},
    )
    return response.content
