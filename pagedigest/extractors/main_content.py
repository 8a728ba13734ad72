"""Locate the main content region of a page.

Candidate classes, evaluated in order:

    1. <main>
    2. <article>
    3. <div> whose class contains a content keyword
    4. <div> whose id contains a content keyword

Each class contributes its largest element (by raw HTML length).  The first
candidate whose normalized text clears the minimum length wins.  Returning
``None`` tells the caller to fall back to whole-page text.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from bs4 import BeautifulSoup, Tag

from pagedigest.extractors.markdown import html_to_markdown
from pagedigest.items import ContentBlock
from pagedigest.settings import CONTENT_KEYWORDS, Settings
from pagedigest.settings import settings as default_settings

logger = logging.getLogger(__name__)


def _has_keyword(value: object) -> bool:
    if isinstance(value, list):
        value = " ".join(str(v) for v in value)
    if not value:
        return False
    lowered = str(value).lower()
    return any(kw in lowered for kw in CONTENT_KEYWORDS)


def _main_tags(soup: BeautifulSoup) -> list[Tag]:
    return soup.find_all("main")


def _article_tags(soup: BeautifulSoup) -> list[Tag]:
    return soup.find_all("article")


def _keyword_class_divs(soup: BeautifulSoup) -> list[Tag]:
    return [el for el in soup.find_all("div") if _has_keyword(el.get("class"))]


def _keyword_id_divs(soup: BeautifulSoup) -> list[Tag]:
    return [el for el in soup.find_all("div") if _has_keyword(el.get("id"))]


_CANDIDATE_FINDERS: tuple[tuple[str, Callable[[BeautifulSoup], list[Tag]]], ...] = (
    ("main", _main_tags),
    ("article", _article_tags),
    ("div.class", _keyword_class_divs),
    ("div#id", _keyword_id_divs),
)


def find_candidates(html: str) -> list[tuple[str, str]]:
    """Return ``(class_name, element_html)`` for the largest match of each class."""
    soup = BeautifulSoup(html, "lxml")
    candidates: list[tuple[str, str]] = []
    for name, finder in _CANDIDATE_FINDERS:
        elements = [str(el) for el in finder(soup) if isinstance(el, Tag)]
        if not elements:
            continue
        best = max(elements, key=len)
        logger.debug("%s: %d matches, largest %d chars", name, len(elements), len(best))
        candidates.append((name, best))
    return candidates


def find_main_content(
    html: str,
    *,
    settings: Settings | None = None,
) -> ContentBlock | None:
    """Return the main content block of *html*, or ``None`` if nothing qualifies."""
    cfg = settings or default_settings
    if not html or not html.strip():
        return None

    for name, fragment in find_candidates(html):
        text = html_to_markdown(fragment)
        if len(text) > cfg.main_content_min_chars:
            logger.debug("main content taken from %s (%d chars)", name, len(text))
            return ContentBlock(text=text)
        logger.debug(
            "%s candidate too short (%d <= %d chars)",
            name, len(text), cfg.main_content_min_chars,
        )
    return None
