"""Live preview of website documents inside an isolated frame.

Generated markup is semi-trusted. It is never inlined into host markup: the
frame document travels in the ``srcdoc`` of a sandboxed ``<iframe>`` without
``allow-same-origin``, so it runs in an opaque origin with no access to the
host's DOM, storage or scripts.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from html import escape

from .models.site import WebsiteDocument

TAILWIND_RUNTIME_URL = "https://cdn.tailwindcss.com"
BASE_FONT_URL = "https://fonts.googleapis.com/css2?family=Inter:wght@300;400;500;600;700&display=swap"
FRAME_SANDBOX = "allow-scripts"


class ViewportMode(str, Enum):
    desktop = "desktop"
    tablet = "tablet"
    mobile = "mobile"


VIEWPORT_WIDTHS: dict[ViewportMode, int | None] = {
    ViewportMode.desktop: None,
    ViewportMode.tablet: 768,
    ViewportMode.mobile: 375,
}

EMPTY_STATE_HTML = """\
<div class="preview-empty">
  <h2>Ready to Build?</h2>
  <p>Describe your business, project, or personal brand and Lumina will handle the design.</p>
</div>"""


def build_frame_document(document: WebsiteDocument) -> str:
    wrappers = "\n".join(
        f'<section id="{escape(section.id)}" data-type="{escape(section.type.value)}">\n'
        f"{section.html}\n"
        "</section>"
        for section in document.sections
    )
    return f"""<!DOCTYPE html>
<html>
<head>
<meta charset="UTF-8">
<script src="{TAILWIND_RUNTIME_URL}"></script>
<style>
@import url('{BASE_FONT_URL}');
html {{ scroll-behavior: smooth; }}
body {{ margin: 0; font-family: 'Inter', sans-serif; overflow-x: hidden; }}
</style>
</head>
<body class="bg-white">
<div id="site-root">
{wrappers}
</div>
</body>
</html>"""


def viewport_style(viewport: ViewportMode) -> str:
    width = VIEWPORT_WIDTHS[viewport]
    if width is None:
        return "width: 100%; height: 100%;"
    return f"width: {width}px; max-width: 100%; height: 100%; margin: 0 auto;"


@dataclass(frozen=True)
class PreviewSurface:
    viewport: ViewportMode
    markup: str
    frame_document: str | None
    revision: int

    @property
    def is_empty(self) -> bool:
        return self.frame_document is None


class PreviewRenderer:
    """Renders the current document; rebuilds the frame when the document object changes."""

    def __init__(self) -> None:
        self._document: WebsiteDocument | None = None
        self._frame_document: str | None = None
        self._revision = 0

    def render(
        self,
        document: WebsiteDocument | None,
        viewport: ViewportMode = ViewportMode.desktop,
    ) -> PreviewSurface:
        viewport = ViewportMode(viewport)
        if document is None:
            self._document = None
            self._frame_document = None
            return PreviewSurface(viewport, EMPTY_STATE_HTML, None, self._revision)

        if document is not self._document:
            self._document = document
            self._frame_document = build_frame_document(document)
            self._revision += 1

        markup = (
            f'<div class="preview-viewport preview-viewport--{viewport.value}" '
            f'style="{viewport_style(viewport)}">'
            f'<iframe title="Website Preview" sandbox="{FRAME_SANDBOX}" '
            f'referrerpolicy="no-referrer" style="width: 100%; height: 100%; border: none;" '
            f'srcdoc="{escape(self._frame_document, quote=True)}"></iframe>'
            "</div>"
        )
        return PreviewSurface(viewport, markup, self._frame_document, self._revision)


def render_preview_page(surface: PreviewSurface, *, title: str = "Preview") -> str:
    """Wrap a surface in a minimal host page for the HTTP preview endpoint."""
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>{escape(title)}</title>
<style>html, body {{ margin: 0; height: 100%; background: #121212; }}</style>
</head>
<body>
{surface.markup}
</body>
</html>"""


__all__ = [
    "ViewportMode",
    "PreviewSurface",
    "PreviewRenderer",
    "build_frame_document",
    "render_preview_page",
]
