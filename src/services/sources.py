"""Fragment source loading.

A fragment's source is raw bytes, an absolute URL, a local file path, or a
path relative to the CDN. Anything that cannot be loaded becomes a single
blank A4 page so one broken content fragment does not sink the whole book.
Fetches are not retried.
"""

from pathlib import Path
from typing import Optional, Union

from config.settings import PlannerPressSettings, settings as default_settings
from constants import PLACEHOLDER_SOURCES
from core.logging import get_logger
from errors import NetworkError
from net.network import RetryConfig, fetch_bytes
from pdf.documents import blank_page_pdf_bytes

logger = get_logger(__name__)


def is_placeholder(source: Union[bytes, str, None]) -> bool:
    """True for sources that stand for "nothing uploaded yet"."""
    if source is None:
        return True
    if isinstance(source, bytes):
        return not source
    return source.strip() in PLACEHOLDER_SOURCES


def resolve_source_url(source: str, cdn_base_url: Optional[str]) -> Optional[str]:
    """Absolute URL for a source, or None if it cannot be resolved.

    Examples:
        >>> resolve_source_url("/modules/a.pdf", "https://cdn.example.com")
        'https://cdn.example.com/modules/a.pdf'
        >>> resolve_source_url("https://x.test/a.pdf", None)
        'https://x.test/a.pdf'
        >>> resolve_source_url("modules/a.pdf", None) is None
        True
    """
    if source.startswith(("http://", "https://")):
        return source
    if cdn_base_url:
        return f"{cdn_base_url.rstrip('/')}/{source.lstrip('/')}"
    return None


class SourceLoader:
    """Turns fragment sources into PDF bytes."""

    def __init__(self, config: Optional[PlannerPressSettings] = None):
        self.config = config or default_settings
        self._retry = RetryConfig(max_retries=1, timeout=self.config.http_timeout)

    def _fallback(self, source: Union[bytes, str], reason: str) -> bytes:
        label = source if isinstance(source, str) else f"<{len(source)} bytes>"
        logger.warning("{} for source {!r}, using blank page", reason, label)
        return blank_page_pdf_bytes()

    def load(self, source: Union[bytes, str]) -> bytes:
        """Load a source, falling back to one blank A4 page."""
        if is_placeholder(source):
            return self._fallback(source, "No file")

        if isinstance(source, bytes):
            return source

        source = source.strip()
        url = resolve_source_url(source, self.config.cdn_base_url)
        if url is None or not source.startswith(("http://", "https://")):
            path = Path(source).expanduser()
            if path.is_file():
                return path.read_bytes()
        if url is None:
            return self._fallback(source, "Unresolvable source")

        try:
            data = fetch_bytes(url, config=self._retry)
        except NetworkError as error:
            return self._fallback(source, f"Fetch failed ({error})")

        if not data:
            return self._fallback(source, "Empty response")
        return data
