"""Convert HTML fragments to Markdown-flavoured text and assemble documents.

The conversion is a fixed sequence of regex passes.  Order matters: noise
containers go first so their headings and links never surface, and entities
are decoded only after tags are gone so ``&lt;tag&gt;`` survives as text.
Nested elements of the same type are not balanced; the first closing tag
wins.
"""

from __future__ import annotations

import logging
import re

from pagedigest.items import ContentBlock
from pagedigest.settings import TRUNCATION_MARKER

logger = logging.getLogger(__name__)

_FLAGS = re.IGNORECASE | re.DOTALL

# Step 1: containers removed together with their contents
_NOISE_RE: tuple[re.Pattern[str], ...] = tuple(
    re.compile(rf"<{tag}\b[^>]*>.*?</{tag}\s*>", _FLAGS)
    for tag in ("script", "style", "noscript", "nav", "footer", "header", "aside", "form")
) + (re.compile(r"<!--.*?-->", re.DOTALL),)

# Step 2: structural markers
_STRUCTURE_RE: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"<h1\b[^>]*>(.*?)</h1\s*>", _FLAGS), r"\n\n# \1\n\n"),
    (re.compile(r"<h2\b[^>]*>(.*?)</h2\s*>", _FLAGS), r"\n\n## \1\n\n"),
    (re.compile(r"<h3\b[^>]*>(.*?)</h3\s*>", _FLAGS), r"\n\n### \1\n\n"),
    (re.compile(r"<h([4-6])\b[^>]*>(.*?)</h\1\s*>", _FLAGS), r"\n\n#### \2\n\n"),
    (re.compile(r"<p\b[^>]*>(.*?)</p\s*>", _FLAGS), r"\n\1\n"),
    (re.compile(r"<br\s*/?>", re.IGNORECASE), "\n"),
    (re.compile(r"<li\b[^>]*>(.*?)</li\s*>", _FLAGS), "\n• \\1"),
    (re.compile(r"<blockquote\b[^>]*>(.*?)</blockquote\s*>", _FLAGS), r"\n> \1\n"),
)

# Step 3: inline emphasis
_EMPHASIS_RE: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"<(strong|b)\b[^>]*>(.*?)</\1\s*>", _FLAGS), r"**\2**"),
    (re.compile(r"<(em|i)\b[^>]*>(.*?)</\1\s*>", _FLAGS), r"*\2*"),
)

# Step 4: links
_LINK_RE = re.compile(
    r"""<a\b[^>]*?\shref\s*=\s*["']([^"']*)["'][^>]*>(.*?)</a\s*>""", _FLAGS,
)

# Step 5: anything tag-shaped that is left
_TAG_RE = re.compile(r"<[^>]+>")

# Step 6: entities
_ENTITY_RE = re.compile(r"&(#[0-9]+|#[xX][0-9a-fA-F]+|[a-zA-Z]+);")
_NAMED_ENTITIES: dict[str, str] = {
    "nbsp": " ",
    "amp": "&",
    "lt": "<",
    "gt": ">",
    "quot": '"',
    "apos": "'",
    "mdash": "—",
    "ndash": "–",
    "hellip": "…",
    "copy": "©",
    "reg": "®",
    "trade": "™",
}

# Step 7: whitespace
_HSPACE_RE = re.compile(r"[^\S\n]+")
_LINE_EDGE_RE = re.compile(r" *\n *")
_EXCESSIVE_BLANK_LINES_RE = re.compile(r"\n{3,}")


def _decode_entity(match: re.Match[str]) -> str:
    ref = match.group(1)
    if ref[0] != "#":
        return _NAMED_ENTITIES.get(ref.lower(), match.group(0))
    try:
        codepoint = int(ref[2:], 16) if ref[1] in "xX" else int(ref[1:])
        return chr(codepoint)
    except (ValueError, OverflowError):
        return match.group(0)


def decode_entities(text: str) -> str:
    """Decode the supported named entities and all numeric character references.

    Decoding is a single pass, so ``&amp;lt;`` becomes ``&lt;`` rather than
    ``<``.  Unknown named entities are left untouched.
    """
    return _ENTITY_RE.sub(_decode_entity, text)


def collapse_whitespace(text: str) -> str:
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _HSPACE_RE.sub(" ", text)
    text = _LINE_EDGE_RE.sub("\n", text)
    text = _EXCESSIVE_BLANK_LINES_RE.sub("\n\n", text)
    return text.strip()


def html_to_markdown(html: str, *, keep_links: bool = False) -> str:
    """Convert *html* to clean Markdown-flavoured text.

    Args:
        html:       HTML fragment or whole document.
        keep_links: Render ``<a href="URL">text</a>`` as ``text (URL)``
                    instead of plain ``text``.  Used by the full-page
                    fallback so link targets stay traceable.
    """
    if not html or not html.strip():
        return ""

    text = html
    for pattern in _NOISE_RE:
        text = pattern.sub("", text)
    for pattern, repl in _STRUCTURE_RE:
        text = pattern.sub(repl, text)
    for pattern, repl in _EMPHASIS_RE:
        text = pattern.sub(repl, text)
    text = _LINK_RE.sub(r"\2 (\1)" if keep_links else r"\2", text)
    text = _TAG_RE.sub(" ", text)
    text = decode_entities(text)
    return collapse_whitespace(text)


# ---------------------------------------------------------------------------
# Document assembly
# ---------------------------------------------------------------------------

def truncate_content(text: str, max_length: int) -> str:
    """Cap *text* at *max_length* characters, appending the truncation marker."""
    if len(text) <= max_length:
        return text
    logger.debug("truncating content from %d to %d chars", len(text), max_length)
    return text[:max_length] + TRUNCATION_MARKER


def format_document(
    title: str,
    summary: str | None,
    site_name: str | None,
    main_content: ContentBlock | None,
    sections: list[ContentBlock],
    fallback: str = "",
) -> str:
    """Render the final document handed to the prompt-assembly layer.

    *fallback* is only used when neither *main_content* nor *sections* has
    anything to show.
    """
    parts: list[str] = []

    if title:
        parts.append(f"# {title}")
    if summary:
        parts.append(f"**Summary:** {summary}")
    if site_name:
        parts.append(f"**Source:** {site_name}")

    parts.append("---")

    if main_content is not None:
        parts.append("## Main Content")
        parts.append(main_content.text)

    if sections:
        parts.append("## Articles & Sections")
        for block in sections:
            parts.append(f"### {block.title}")
            parts.append(block.text)

    if main_content is None and not sections and fallback:
        parts.append(fallback)

    return "\n\n".join(parts)
