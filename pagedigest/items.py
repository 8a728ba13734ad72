"""Pydantic schemas for fetched pages and extraction output."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator


class RawDocument(BaseModel):
    """A fetched page, owned by a single extraction call."""

    model_config = {"frozen": True}

    url: str
    html: str


class PageMetadata(BaseModel):
    """Title, description and Open Graph fields pulled from the page head."""

    model_config = {"frozen": True}

    title: str = ""
    description: str = ""
    og_title: str | None = None
    og_description: str | None = None
    og_site_name: str | None = None

    @field_validator("title", "description", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v or ""

    @property
    def display_title(self) -> str:
        return self.title or self.og_title or ""

    @property
    def summary(self) -> str:
        return self.description or self.og_description or ""


class ContentBlock(BaseModel):
    """A normalized text fragment; untitled for main content, titled for sections."""

    model_config = {"frozen": True}

    title: str | None = None
    text: str = Field(min_length=1)


class ExtractionResult(BaseModel):
    """Canonical output of the pipeline, serialised as the endpoint response."""

    model_config = {"frozen": True}

    content: str
    url: str
    title: str = ""
    description: str = ""

    @field_validator("url", mode="before")
    @classmethod
    def strip_url(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v
