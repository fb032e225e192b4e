"""Grayscale conversion of PDF fragments.

Two strategies:
- remote: upload to the conversion service (``GrayscaleClient``)
- local: rewrite content-stream colour operators (``pdf.content_stream``)

The remote client keeps a process-wide cache of converted documents and
caps concurrent uploads with a fixed-size worker pool. Callers beyond the cap
wait in submission order.
"""

import threading
import zlib
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from pypdf import PdfWriter

from config.settings import PlannerPressSettings, settings as default_settings
from core.logging import get_logger
from errors import ConfigurationError, GrayscaleConversionError, NetworkError
from net.network import RetryConfig, post_file
from pdf.content_stream import grayscale_pdf_bytes
from pdf.documents import document_bytes, load_document
from pdf.models import GrayscaleStrategy

logger = get_logger(__name__)


def fingerprint(data: bytes) -> str:
    """Cache key for a payload: size plus a CRC32 of the bytes."""
    return f"{len(data)}:{zlib.crc32(data) & 0xFFFFFFFF:08x}"


class ConversionCache:
    """Bounded map of converted documents.

    Eviction removes the oldest insertion; reads do not refresh an entry.
    """

    def __init__(self, max_entries: int = 32):
        self.max_entries = max_entries
        self._entries: dict[str, bytes] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, key: str) -> Optional[bytes]:
        with self._lock:
            value = self._entries.get(key)
            if value is None:
                self.misses += 1
            else:
                self.hits += 1
            return value

    def set(self, key: str, value: bytes) -> None:
        with self._lock:
            if key in self._entries:
                self._entries[key] = value
                return
            while len(self._entries) >= self.max_entries:
                oldest = next(iter(self._entries))
                del self._entries[oldest]
            self._entries[key] = value

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0

    def get_stats(self) -> dict:
        total = self.hits + self.misses
        hit_rate = (self.hits / total * 100) if total > 0 else 0
        return {
            "size": len(self),
            "max_entries": self.max_entries,
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": f"{hit_rate:.1f}%",
        }


def _compressed_resave(data: bytes) -> bytes:
    writer = PdfWriter(clone_from=load_document(data))
    for page in writer.pages:
        page.compress_content_streams()
    writer.compress_identical_objects(remove_identicals=True, remove_orphans=True)
    return document_bytes(writer)


def _rebuilt(data: bytes) -> bytes:
    reader = load_document(data)
    writer = PdfWriter()
    for page in reader.pages:
        writer.add_page(page)
    return document_bytes(writer)


def shrink_payload(data: bytes, *, threshold: int, target_ratio: float) -> bytes:
    """Make a large payload smaller before upload.

    Payloads at or below ``threshold`` are returned untouched. Otherwise the
    document is re-saved with compressed streams and deduplicated objects;
    if that misses ``target_ratio`` of the original size the document is also
    rebuilt page by page into a fresh file. The smallest candidate wins,
    the original included. Any failure returns the original bytes.
    """
    if len(data) <= threshold:
        return data

    candidates = [data]
    try:
        compressed = _compressed_resave(data)
        candidates.append(compressed)
        if len(compressed) > len(data) * target_ratio:
            candidates.append(_rebuilt(data))
    except Exception as error:
        logger.warning("Shrink pass failed, sending original payload: {}", error)
        return data

    smallest = min(candidates, key=len)
    logger.debug("Shrink pass: {} -> {} bytes", len(data), len(smallest))
    return smallest


class GrayscaleClient:
    """Client for the remote grayscale conversion service."""

    def __init__(self, config: Optional[PlannerPressSettings] = None):
        self.config = config or default_settings
        self.cache = ConversionCache(self.config.grayscale_cache_entries)
        self._pool = ThreadPoolExecutor(
            max_workers=self.config.grayscale_max_concurrency,
            thread_name_prefix="grayscale",
        )
        self._retry = RetryConfig(max_retries=1, timeout=self.config.http_timeout * 4)

    def _target(self) -> tuple[str, dict[str, str]]:
        if self.config.grayscale_proxy_url:
            return self.config.grayscale_proxy_url, {}
        if not self.config.grayscale_api_key:
            raise ConfigurationError(
                "Missing PP_GRAYSCALE_API_KEY for direct grayscale conversion"
            )
        return self.config.grayscale_endpoint, {
            "X-API-Key": self.config.grayscale_api_key
        }

    def _upload(self, data: bytes) -> bytes:
        url, headers = self._target()
        payload = shrink_payload(
            data,
            threshold=self.config.grayscale_shrink_threshold_bytes,
            target_ratio=self.config.grayscale_shrink_target_ratio,
        )
        try:
            converted = post_file(url, payload, headers=headers, config=self._retry)
        except NetworkError as error:
            detail = error.detail or str(error)
            raise GrayscaleConversionError(
                f"Grayscale conversion failed: {detail}"
            ) from error

        if not converted:
            raise GrayscaleConversionError(
                "Grayscale conversion failed: empty response"
            )
        return converted

    def convert(self, data: bytes) -> bytes:
        """Return the grayscale version of a PDF.

        Raises:
            GrayscaleConversionError: If the service fails
            ConfigurationError: If no proxy and no API key are configured
        """
        key = fingerprint(data)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Grayscale cache hit for {}", key)
            return cached

        converted = self._pool.submit(self._upload, data).result()
        self.cache.set(key, converted)
        logger.info("Converted {} to grayscale ({} bytes)", key, len(converted))
        return converted

    def shutdown(self) -> None:
        self._pool.shutdown(wait=True)


_client: Optional[GrayscaleClient] = None
_client_lock = threading.Lock()


def get_grayscale_client() -> GrayscaleClient:
    """Get the process-wide grayscale client."""
    global _client
    with _client_lock:
        if _client is None:
            _client = GrayscaleClient()
        return _client


def convert_to_grayscale(
    data: bytes,
    *,
    strategy: GrayscaleStrategy = GrayscaleStrategy.REMOTE,
    client: Optional[GrayscaleClient] = None,
) -> bytes:
    """Convert PDF bytes to grayscale with the selected strategy."""
    if strategy == GrayscaleStrategy.LOCAL:
        return grayscale_pdf_bytes(data)
    return (client or get_grayscale_client()).convert(data)
