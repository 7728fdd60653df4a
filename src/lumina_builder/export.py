from __future__ import annotations

import re
from dataclasses import dataclass
from html import escape

from .models.site import WebsiteDocument
from .preview import BASE_FONT_URL, TAILWIND_RUNTIME_URL


_SLUG_RE = re.compile(r"[^a-z0-9]+")


@dataclass(frozen=True)
class ExportedSite:
    filename: str
    html: str
    media_type: str = "text/html"


def slugify(title: str) -> str:
    slug = _SLUG_RE.sub("-", title.lower()).strip("-")
    return slug or "website"


def render_standalone_html(site: WebsiteDocument) -> str:
    body = "\n".join(section.html for section in site.sections)
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{escape(site.metadata.title)}</title>
    <meta name="description" content="{escape(site.metadata.description, quote=True)}">
    <script src="{TAILWIND_RUNTIME_URL}"></script>
    <link href="{BASE_FONT_URL}" rel="stylesheet">
    <style>body {{ font-family: 'Inter', sans-serif; scroll-behavior: smooth; margin: 0; }}</style>
</head>
<body>{body}</body>
</html>"""


def export_site(site: WebsiteDocument) -> ExportedSite:
    return ExportedSite(
        filename=f"{slugify(site.metadata.title)}.html",
        html=render_standalone_html(site),
    )


__all__ = ["ExportedSite", "export_site", "render_standalone_html", "slugify"]
