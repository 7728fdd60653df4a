from __future__ import annotations

import re
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

# Fragments are dropped into a <body>; a document wrapper would nest documents.
_DOCUMENT_WRAPPER_RE = re.compile(r"<\s*(!doctype|/?\s*(html|head|body)\b)", re.IGNORECASE)


class SectionType(str, Enum):
    hero = "hero"
    features = "features"
    pricing = "pricing"
    testimonials = "testimonials"
    stats = "stats"
    faq = "faq"
    cta = "cta"
    footer = "footer"
    navbar = "navbar"


class WebsiteMetadata(BaseModel):
    title: str = Field(min_length=1)
    description: str = ""
    primary_color: str = Field(default="", alias="primaryColor")
    font_family: str = Field(default="", alias="fontFamily")

    class Config:
        populate_by_name = True


class WebsiteSection(BaseModel):
    id: str = Field(min_length=1)
    type: SectionType
    title: str = ""
    content: Any = Field(default=None, description="Opaque model-chosen payload, never interpreted")
    html: str

    @field_validator("html")
    @classmethod
    def _reject_document_wrapper(cls, value: str) -> str:
        if _DOCUMENT_WRAPPER_RE.search(value):
            raise ValueError("section html must be a fragment without <html>, <head> or <body> tags")
        return value


class WebsiteDocument(BaseModel):
    id: str | None = Field(default=None, alias="_id")
    metadata: WebsiteMetadata
    sections: list[WebsiteSection] = Field(min_length=1)
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "metadata": {
                    "title": "Acme",
                    "description": "Rockets for everyone",
                    "primaryColor": "#2563eb",
                    "fontFamily": "Inter, sans-serif",
                },
                "sections": [
                    {"id": "s1", "type": "hero", "title": "Hero", "html": "<section>A</section>"},
                    {"id": "s2", "type": "footer", "title": "Footer", "html": "<section>B</section>"},
                ],
            }
        }

    @model_validator(mode="after")
    def _unique_section_ids(self) -> "WebsiteDocument":
        seen: set[str] = set()
        for section in self.sections:
            if section.id in seen:
                raise ValueError(f"duplicate section id: {section.id}")
            seen.add(section.id)
        return self

    def content_dump(self) -> dict[str, Any]:
        """Metadata and sections only, in wire format (no identity or timestamps)."""
        return self.model_dump(
            by_alias=True,
            mode="json",
            include={"metadata", "sections"},
        )

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


class GeneratedMetadata(WebsiteMetadata):
    """Metadata as the model must return it: every field present."""

    description: str
    primary_color: str = Field(alias="primaryColor")
    font_family: str = Field(alias="fontFamily")


class GeneratedSection(WebsiteSection):
    title: str


class GeneratedDocument(WebsiteDocument):
    """Strict shape of model output; saved documents use the looser ``WebsiteDocument``."""

    metadata: GeneratedMetadata
    sections: list[GeneratedSection] = Field(min_length=1)

    def to_document(self) -> WebsiteDocument:
        return WebsiteDocument.model_validate(self.model_dump(by_alias=True))


__all__ = [
    "SectionType",
    "WebsiteMetadata",
    "WebsiteSection",
    "WebsiteDocument",
    "GeneratedDocument",
]
