"""Split a page into titled sub-articles.

Every ``<section>`` and ``<div>`` that contains an ``<h1>``-``<h3>`` is a
candidate, in document order.  Blocks never overlap: a candidate that wraps
another qualifying candidate is skipped in favour of the innermost ones.
"""

from __future__ import annotations

import logging

from bs4 import BeautifulSoup, Tag

from pagedigest.extractors.markdown import html_to_markdown
from pagedigest.items import ContentBlock
from pagedigest.settings import Settings
from pagedigest.settings import settings as default_settings

logger = logging.getLogger(__name__)

_BLOCK_TAGS = ["section", "div"]
_HEADING_TAGS = ["h1", "h2", "h3"]


def _section_block(el: Tag, min_chars: int) -> ContentBlock | None:
    heading = el.find(_HEADING_TAGS)
    if not isinstance(heading, Tag):
        return None

    title = html_to_markdown(heading.decode_contents())
    if not title:
        return None

    text = html_to_markdown(str(el))
    if len(text) <= min_chars:
        logger.debug("section %r dropped: %d chars", title, len(text))
        return None
    return ContentBlock(title=title, text=text)


def extract_sections(
    html: str,
    *,
    settings: Settings | None = None,
) -> list[ContentBlock]:
    """Return up to ``settings.max_sections`` non-overlapping titled blocks."""
    cfg = settings or default_settings
    if not html or not html.strip() or cfg.max_sections <= 0:
        return []

    soup = BeautifulSoup(html, "lxml")
    qualifying: list[tuple[Tag, ContentBlock]] = []
    for el in soup.find_all(_BLOCK_TAGS):
        if not isinstance(el, Tag):
            continue
        block = _section_block(el, cfg.section_min_chars)
        if block is not None:
            qualifying.append((el, block))

    # Wrappers: any qualifying element with a qualifying descendant
    wrappers: set[int] = set()
    for el, _ in qualifying:
        for parent in el.parents:
            if parent.name in _BLOCK_TAGS:
                wrappers.add(id(parent))

    blocks = [block for el, block in qualifying if id(el) not in wrappers]
    if len(blocks) < len(qualifying):
        logger.debug("skipped %d wrapper blocks", len(qualifying) - len(blocks))

    logger.debug("extracted %d sections", min(len(blocks), cfg.max_sections))
    return blocks[: cfg.max_sections]
