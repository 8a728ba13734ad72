"""pagedigest - turn a web page into bounded, LLM-ready structured text.

Quick single-URL usage::

    from pagedigest import fetch

    result = fetch("https://example.com/blog/some-post")
    print(result.title)
    print(result.content)

Pre-fetched HTML (no network)::

    from pagedigest import extract

    result = extract(html, url="https://example.com/blog/some-post")

HTTP endpoint::

    uvicorn pagedigest.api:app
"""

from pagedigest.items import ContentBlock, ExtractionResult, PageMetadata, RawDocument
from pagedigest.query import (
    FetchError,
    FetchFailedError,
    FetchTimeoutError,
    InvalidURLError,
    extract,
    extract_plain,
    fetch,
    fetch_html,
    parse,
)
from pagedigest.settings import Settings

__version__ = "0.1.0"
__all__ = [
    "ContentBlock",
    "ExtractionResult",
    "FetchError",
    "FetchFailedError",
    "FetchTimeoutError",
    "InvalidURLError",
    "PageMetadata",
    "RawDocument",
    "Settings",
    "extract",
    "extract_plain",
    "fetch",
    "fetch_html",
    "parse",
]
