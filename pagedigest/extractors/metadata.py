"""Title, description and Open Graph extraction from raw HTML.

First occurrence wins for every field.  The lxml parser lower-cases tag and
attribute names, so ``<META NAME="Description">`` matches like its lowercase
form and attribute order is irrelevant.  Tags are not required to sit inside
``<head>``.
"""

from __future__ import annotations

import logging
from typing import Any

from bs4 import BeautifulSoup, Tag

from pagedigest.items import PageMetadata

logger = logging.getLogger(__name__)

_OG_FIELDS: dict[str, str] = {
    "og:title": "og_title",
    "og:description": "og_description",
    "og:site_name": "og_site_name",
}


def _safe_str(val: Any, default: str = "") -> str:
    """Safely convert a BeautifulSoup attribute value (str | list | None) to str."""
    if val is None:
        return default
    if isinstance(val, list):
        return " ".join(str(v) for v in val)
    return str(val)


def _extract_title(soup: BeautifulSoup) -> str:
    tag = soup.find("title")
    if not isinstance(tag, Tag):
        return ""
    return tag.get_text().strip()


def _extract_meta(soup: BeautifulSoup) -> dict[str, str]:
    """Collect ``description`` and the supported ``og:*`` values, first one wins."""
    found: dict[str, str] = {}

    for tag in soup.find_all("meta"):
        if not isinstance(tag, Tag):
            continue
        content = tag.get("content")
        if content is None:
            continue

        name = _safe_str(tag.get("name")).strip().lower()
        if name == "description" and "description" not in found:
            found["description"] = _safe_str(content).strip()

        prop = _safe_str(tag.get("property")).strip().lower()
        key = _OG_FIELDS.get(prop)
        if key and key not in found:
            found[key] = _safe_str(content).strip()

    return found


def extract_metadata(html: str) -> PageMetadata:
    """Extract :class:`PageMetadata` from *html*.

    Missing fields are empty (``title``/``description``) or ``None`` (Open
    Graph).  Entity references are decoded by the parser.
    """
    if not html or not html.strip():
        return PageMetadata()

    soup = BeautifulSoup(html, "lxml")
    meta = _extract_meta(soup)
    logger.debug("metadata fields found: %s", sorted(meta))

    return PageMetadata(
        title=_extract_title(soup),
        description=meta.get("description", ""),
        og_title=meta.get("og_title"),
        og_description=meta.get("og_description"),
        og_site_name=meta.get("og_site_name"),
    )
