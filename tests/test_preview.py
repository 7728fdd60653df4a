import re
from html import unescape

import pytest

from lumina_builder.models.site import WebsiteDocument
from lumina_builder.preview import (
    PreviewRenderer,
    ViewportMode,
    build_frame_document,
    render_preview_page,
)

ACME = {
    "metadata": {"title": "Acme"},
    "sections": [
        {"id": "s1", "type": "hero", "html": "<section>A</section>"},
        {"id": "s2", "type": "footer", "html": "<section>B</section>"},
    ],
}

_WRAPPER_RE = re.compile(
    r'<section id="([^"]*)" data-type="([^"]*)">\n(.*?)\n</section>', re.DOTALL
)


def test_frame_has_one_wrapper_per_section_in_order():
    frame = build_frame_document(WebsiteDocument.model_validate(ACME))
    wrappers = _WRAPPER_RE.findall(frame)

    assert [(sid, kind) for sid, kind, _ in wrappers] == [("s1", "hero"), ("s2", "footer")]
    assert [inner for _, _, inner in wrappers] == ["<section>A</section>", "<section>B</section>"]
    for _, _, inner in wrappers:
        assert "<html" not in inner


def test_frame_loads_runtime_font_and_reset_before_sections():
    frame = build_frame_document(WebsiteDocument.model_validate(ACME))

    runtime = frame.index("cdn.tailwindcss.com")
    font = frame.index("fonts.googleapis.com")
    reset = frame.index("scroll-behavior: smooth")
    first_section = frame.index('id="s1"')
    assert runtime < font < reset < first_section
    assert "margin: 0" in frame


def test_frame_is_sandboxed_not_inlined():
    surface = PreviewRenderer().render(WebsiteDocument.model_validate(ACME))

    assert 'sandbox="allow-scripts"' in surface.markup
    assert "allow-same-origin" not in surface.markup
    # Section markup only appears escaped inside srcdoc.
    assert "<section>A</section>" not in surface.markup
    srcdoc = re.search(r'srcdoc="([^"]*)"', surface.markup).group(1)
    assert unescape(srcdoc) == surface.frame_document


def test_absent_document_renders_empty_state():
    surface = PreviewRenderer().render(None, ViewportMode.tablet)

    assert surface.is_empty
    assert "Ready to Build?" in surface.markup
    assert "<iframe" not in surface.markup


@pytest.mark.parametrize(
    "viewport, width",
    [(ViewportMode.desktop, "width: 100%"), (ViewportMode.tablet, "width: 768px"), (ViewportMode.mobile, "width: 375px")],
)
def test_viewport_only_changes_container(viewport, width):
    renderer = PreviewRenderer()
    site = WebsiteDocument.model_validate(ACME)
    baseline = renderer.render(site, ViewportMode.desktop)
    surface = renderer.render(site, viewport)

    assert surface.markup.startswith(f'<div class="preview-viewport preview-viewport--{viewport.value}"')
    assert width in surface.markup
    assert surface.frame_document == baseline.frame_document


def test_rebuilds_on_document_replacement_only():
    renderer = PreviewRenderer()
    site = WebsiteDocument.model_validate(ACME)

    first = renderer.render(site)
    again = renderer.render(site, "mobile")
    replaced = renderer.render(WebsiteDocument.model_validate(ACME))

    assert again.revision == first.revision
    assert again.frame_document is first.frame_document
    assert replaced.revision == first.revision + 1


def test_section_ids_are_attribute_escaped():
    payload = {
        "metadata": {"title": "Acme"},
        "sections": [{"id": 's1" onload="x', "type": "hero", "html": "<p>A</p>"}],
    }
    frame = build_frame_document(WebsiteDocument.model_validate(payload))
    assert 'id="s1&quot; onload=&quot;x"' in frame


def test_preview_page_wraps_surface():
    surface = PreviewRenderer().render(WebsiteDocument.model_validate(ACME))
    page = render_preview_page(surface, title="Acme <b>")

    assert page.startswith("<!DOCTYPE html>")
    assert "<title>Acme &lt;b&gt;</title>" in page
    assert surface.markup in page
