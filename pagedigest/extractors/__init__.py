"""Extraction sub-package: metadata, main content, sections and text normalization."""

from .main_content import find_main_content
from .markdown import decode_entities, format_document, html_to_markdown, truncate_content
from .metadata import extract_metadata
from .sections import extract_sections

__all__ = [
    "decode_entities",
    "extract_metadata",
    "extract_sections",
    "find_main_content",
    "format_document",
    "html_to_markdown",
    "truncate_content",
]
