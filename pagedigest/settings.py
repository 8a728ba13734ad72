"""Runtime settings for pagedigest.

Every value can be overridden through a ``PAGEDIGEST_*`` environment
variable.  Public functions accept an optional ``settings=`` argument; when it
is omitted the module-level :data:`settings` instance is used::

    from pagedigest.settings import Settings

    strict = Settings(max_sections=5, request_timeout=5.0)
    result = fetch("https://example.com/post", settings=strict)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

_DEFAULT_UA = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/122.0.0.0 Safari/537.36"
)

TRUNCATION_MARKER = "\n\n[Content truncated...]"

# Class/id substrings that mark a <div> as a main-content candidate
CONTENT_KEYWORDS: tuple[str, ...] = (
    "content",
    "article",
    "post",
    "entry",
    "story",
    "main",
)


def _env_int(name: str, default: int) -> int:
    return int(os.environ.get(name, str(default)))


def _env_float(name: str, default: float) -> float:
    return float(os.environ.get(name, str(default)))


@dataclass(frozen=True)
class Settings:
    # ------------------------------------------------------------------
    # Fetcher
    # ------------------------------------------------------------------
    request_timeout: float = field(
        default_factory=lambda: _env_float("PAGEDIGEST_REQUEST_TIMEOUT", 15.0)
    )
    user_agent: str = field(
        default_factory=lambda: os.environ.get("PAGEDIGEST_USER_AGENT", _DEFAULT_UA)
    )

    # ------------------------------------------------------------------
    # Size caps (rich pipeline / plain pipeline)
    # ------------------------------------------------------------------
    max_length: int = field(
        default_factory=lambda: _env_int("PAGEDIGEST_MAX_LENGTH", 80_000)
    )
    plain_max_length: int = field(
        default_factory=lambda: _env_int("PAGEDIGEST_PLAIN_MAX_LENGTH", 50_000)
    )

    # ------------------------------------------------------------------
    # Extraction thresholds
    # ------------------------------------------------------------------
    main_content_min_chars: int = field(
        default_factory=lambda: _env_int("PAGEDIGEST_MAIN_MIN_CHARS", 200)
    )
    section_min_chars: int = field(
        default_factory=lambda: _env_int("PAGEDIGEST_SECTION_MIN_CHARS", 100)
    )
    max_sections: int = field(
        default_factory=lambda: _env_int("PAGEDIGEST_MAX_SECTIONS", 10)
    )

    # ------------------------------------------------------------------
    # HTTP endpoint
    # ------------------------------------------------------------------
    cors_origins: tuple[str, ...] = field(
        default_factory=lambda: tuple(
            o.strip()
            for o in os.environ.get("PAGEDIGEST_CORS_ORIGINS", "*").split(",")
            if o.strip()
        )
    )


# Module-level default used when no explicit settings are passed.
settings = Settings()
