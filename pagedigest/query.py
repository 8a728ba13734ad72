"""pagedigest.query - single-URL fetch and extraction API.

Basic usage::

    from pagedigest.query import fetch

    result = fetch("https://example.com/blog/some-post")
    print(result.title)
    print(result.content)

    # As a plain dict (the endpoint response body)
    data = fetch("https://example.com/blog/some-post").model_dump()

Low-level access::

    from pagedigest.query import extract, fetch_html

    html = fetch_html("https://example.com/blog/post")
    result = extract(html, url="https://example.com/blog/post")

Uses only the stdlib (``urllib``) for HTTP.  One request per call, no
retries: retry policy belongs to the caller.  The request runs on a worker
thread so the timeout bounds the whole exchange, not just each socket read.
"""

from __future__ import annotations

import gzip
import logging
import time
import urllib.error
import urllib.request
import zlib
from concurrent.futures import ThreadPoolExecutor
from typing import Literal
from urllib.parse import quote, urlsplit, urlunsplit

from pagedigest.extractors.main_content import find_main_content
from pagedigest.extractors.markdown import format_document, html_to_markdown, truncate_content
from pagedigest.extractors.metadata import extract_metadata
from pagedigest.extractors.sections import extract_sections
from pagedigest.items import ExtractionResult, RawDocument
from pagedigest.settings import Settings
from pagedigest.settings import settings as default_settings

logger = logging.getLogger(__name__)

_READ_CHUNK = 64 * 1024
_MIN_SOCKET_TIMEOUT = 0.01

# Characters left as-is when percent-encoding URL components
_PATH_SAFE = "/%:@!$&'()*+,;=~"
_QUERY_SAFE = _PATH_SAFE + "?"

Mode = Literal["rich", "plain"]


# ---------------------------------------------------------------------------
# Public exceptions
# ---------------------------------------------------------------------------

class FetchError(RuntimeError):
    """Raised when a URL cannot be fetched.

    The base class covers network-level failures (DNS, refused connection,
    undecodable body).  The subclasses mark conditions blamed on the
    caller-supplied URL.

    Attributes:
        url    -- the URL that failed
        status -- HTTP status code (0 if no response was received)
    """

    def __init__(self, message: str, url: str = "", status: int = 0) -> None:
        super().__init__(message)
        self.url = url
        self.status = status


class InvalidURLError(FetchError):
    """The input is not an absolute http(s) URL."""


class FetchFailedError(FetchError):
    """The server answered with a non-2xx status."""


class FetchTimeoutError(FetchError):
    """The request did not complete within the configured window."""


def validate_url(url: str | None) -> str:
    """Return *url* normalized for the wire, or raise :class:`InvalidURLError`.

    Non-ASCII characters in the path, query and fragment are percent-encoded
    and an internationalized host is IDNA-encoded, so the result is always a
    plain ASCII URL.  Existing ``%XX`` escapes are kept.
    """
    url = (url or "").strip()
    if not url:
        raise InvalidURLError("URL is required", url=url)
    try:
        parts = urlsplit(url)
    except ValueError as exc:
        raise InvalidURLError("Invalid URL format", url=url) from exc
    if parts.scheme.lower() not in ("http", "https") or not parts.netloc:
        raise InvalidURLError("Invalid URL format", url=url)

    netloc = parts.netloc
    if not netloc.isascii():
        try:
            netloc = netloc.encode("idna").decode("ascii")
        except UnicodeError as exc:
            raise InvalidURLError("Invalid URL format", url=url) from exc

    return urlunsplit((
        parts.scheme.lower(),
        netloc,
        quote(parts.path, safe=_PATH_SAFE),
        quote(parts.query, safe=_QUERY_SAFE),
        quote(parts.fragment, safe=_QUERY_SAFE),
    ))


def _decode_response_body(raw: bytes, headers: object | None, url: str) -> str:
    encoding = ""
    if headers is not None:
        try:
            encoding = str(headers.get("Content-Encoding", "") or "").lower().strip()
        except Exception:
            encoding = ""

    try:
        if encoding == "gzip":
            raw = gzip.decompress(raw)
        elif encoding in ("deflate", "zlib"):
            raw = zlib.decompress(raw)
    except (OSError, zlib.error) as exc:
        raise FetchError(f"{encoding} decompression failed for {url}: {exc}", url=url) from exc

    charset = "utf-8"
    if headers is not None:
        try:
            charset = headers.get_content_charset("utf-8") or "utf-8"
        except Exception:
            charset = "utf-8"
    try:
        return raw.decode(charset, errors="replace")
    except (LookupError, ValueError):
        return raw.decode("utf-8", errors="replace")


def _set_read_timeout(resp: object, seconds: float) -> None:
    """Shrink the socket timeout of *resp* to the time left in the window."""
    raw = getattr(getattr(resp, "fp", None), "raw", None)
    sock = getattr(raw, "_sock", None)
    if sock is not None:
        sock.settimeout(max(seconds, _MIN_SOCKET_TIMEOUT))


def _read_body(resp: object, deadline: float, url: str, timeout: float) -> bytes:
    """Read *resp* until EOF, aborting once *deadline* (monotonic) has passed.

    ``read1`` returns whatever has arrived instead of waiting for a full
    chunk, so a server that trickles bytes cannot hold a read past the
    deadline.
    """
    chunks: list[bytes] = []
    while True:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise FetchTimeoutError(
                f"Request timed out after {timeout:g}s fetching {url}", url=url,
            )
        _set_read_timeout(resp, remaining)
        chunk = resp.read1(_READ_CHUNK)  # type: ignore[attr-defined]
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks)


def _get(req: urllib.request.Request, url: str, timeout: float, deadline: float) -> str:
    with urllib.request.urlopen(req, timeout=timeout) as resp:
        status = int(getattr(resp, "status", 200) or 200)
        if not 200 <= status < 300:
            raise FetchFailedError(
                f"Failed to fetch URL: {status} {getattr(resp, 'reason', '')}".rstrip(),
                url=url,
                status=status,
            )
        raw = _read_body(resp, deadline, url, timeout)
        return _decode_response_body(raw, resp.headers, url)


# ---------------------------------------------------------------------------
# Low-level HTTP fetch
# ---------------------------------------------------------------------------

def _download_html(url: str, cfg: Settings) -> str:
    """GET an already-validated *url* within ``cfg.request_timeout``."""
    timeout = cfg.request_timeout
    req = urllib.request.Request(
        url,
        headers={
            "User-Agent": cfg.user_agent,
            "Accept": (
                "text/html,application/xhtml+xml,application/xml;"
                "q=0.9,image/avif,image/webp,*/*;q=0.8"
            ),
            "Accept-Language": "en-US,en;q=0.9",
            "Accept-Encoding": "gzip, deflate",
            "Cache-Control": "no-cache",
        },
    )

    deadline = time.monotonic() + timeout
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="pagedigest-fetch")
    try:
        future = executor.submit(_get, req, url, timeout, deadline)
        return future.result(timeout=timeout)

    except urllib.error.HTTPError as exc:
        raise FetchFailedError(
            f"Failed to fetch URL: {exc.code} {exc.reason}",
            url=url,
            status=exc.code,
        ) from exc

    except urllib.error.URLError as exc:
        if isinstance(exc.reason, TimeoutError):
            raise FetchTimeoutError(
                f"Request timed out after {timeout:g}s fetching {url}", url=url,
            ) from exc
        raise FetchError(f"URL error fetching {url}: {exc.reason}", url=url) from exc

    except TimeoutError as exc:
        # Also covers the worker not finishing within the window.
        raise FetchTimeoutError(
            f"Request timed out after {timeout:g}s fetching {url}", url=url,
        ) from exc

    except FetchError:
        raise

    except OSError as exc:
        raise FetchError(f"Network error fetching {url}: {exc}", url=url) from exc

    finally:
        # The worker stops on its own: every socket read is bounded by the deadline.
        executor.shutdown(wait=False)


def fetch_html(url: str, *, settings: Settings | None = None) -> str:
    """Fetch *url* and return the response body as a decoded string.

    Args:
        url:      Absolute HTTP/HTTPS URL.
        settings: Optional :class:`~pagedigest.settings.Settings` override
                  (timeout and User-Agent).

    Returns:
        Response body decoded to ``str``.

    Raises:
        InvalidURLError:   *url* is empty or not an absolute http(s) URL.
        FetchFailedError:  The server returned a non-2xx status.
        FetchTimeoutError: No complete response within ``request_timeout``.
        FetchError:        Any other network-level failure.
    """
    cfg = settings or default_settings
    return _download_html(validate_url(url), cfg)


# ---------------------------------------------------------------------------
# Extraction (pure HTML → ExtractionResult, no network)
# ---------------------------------------------------------------------------

def extract(
    html: str,
    *,
    url: str = "",
    settings: Settings | None = None,
) -> ExtractionResult:
    """Run the rich pipeline on *html* and return an :class:`ExtractionResult`.

    Metadata, main content and sections are extracted independently; any of
    them may come back empty.  When neither main content nor sections are
    found, the whole page is normalized with link targets preserved.  The
    assembled document is capped at ``settings.max_length``.

    Parser errors propagate; there is no partial result.
    """
    cfg = settings or default_settings
    doc = RawDocument(url=url, html=html)

    meta = extract_metadata(doc.html)
    main = find_main_content(doc.html, settings=cfg)
    sections = extract_sections(doc.html, settings=cfg)

    fallback = ""
    if main is None and not sections:
        logger.debug("no structured content in %s, using full-page text", doc.url)
        fallback = html_to_markdown(doc.html, keep_links=True)

    content = format_document(
        title=meta.display_title,
        summary=meta.summary,
        site_name=meta.og_site_name,
        main_content=main,
        sections=sections,
        fallback=fallback,
    )

    return ExtractionResult(
        content=truncate_content(content, cfg.max_length),
        url=doc.url,
        title=meta.display_title,
        description=meta.summary,
    )


def extract_plain(
    html: str,
    *,
    url: str = "",
    settings: Settings | None = None,
) -> ExtractionResult:
    """Lean variant: whole-page text with links kept, capped at ``plain_max_length``."""
    cfg = settings or default_settings
    meta = extract_metadata(html)
    content = html_to_markdown(html, keep_links=True)
    return ExtractionResult(
        content=truncate_content(content, cfg.plain_max_length),
        url=url,
        title=meta.display_title,
        description=meta.summary,
    )


def parse(html: str, url: str = "", *, settings: Settings | None = None) -> ExtractionResult:
    """Parse pre-fetched HTML with no network requests."""
    return extract(html, url=url, settings=settings)


# ---------------------------------------------------------------------------
# Main public API
# ---------------------------------------------------------------------------

def fetch(
    url: str | None,
    *,
    mode: Mode = "rich",
    settings: Settings | None = None,
) -> ExtractionResult:
    """Fetch *url* and return its :class:`~pagedigest.items.ExtractionResult`.

    Args:
        url:      Absolute HTTP/HTTPS URL.
        mode:     ``"rich"`` (default) for the structured pipeline, ``"plain"``
                  for the whole-page variant.
        settings: Optional settings override.

    Raises:
        :class:`FetchError` or one of its subclasses when the page cannot be
        fetched.  Extraction itself never fails on missing content.
    """
    logger.info("fetch: %s (mode=%s)", url, mode)
    cfg = settings or default_settings
    url = validate_url(url)
    html = _download_html(url, cfg)
    if mode == "plain":
        return extract_plain(html, url=url, settings=cfg)
    return extract(html, url=url, settings=cfg)
