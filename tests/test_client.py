import asyncio
import json

import httpx
import pytest

from lumina_builder.client import SiteBuilderClient
from lumina_builder.errors import GenerationFailure, PersistenceFailure, SiteNotFound


def run_with(handler, call):
    async def main():
        async with SiteBuilderClient(
            base_url="http://lumina.test", transport=httpx.MockTransport(handler)
        ) as client:
            return await call(client)

    return asyncio.run(main())


def test_generate_posts_prompt(site_payload):
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=site_payload)

    site = run_with(handler, lambda c: c.generate("Bakery"))

    assert seen == {"path": "/api/generate", "body": {"prompt": "Bakery"}}
    assert site.metadata.title == "Acme Rockets"


def test_refine_sends_current_site(site, site_payload):
    seen = {}

    def handler(request):
        seen.update(json.loads(request.content))
        return httpx.Response(200, json=site_payload)

    run_with(handler, lambda c: c.refine(site, "Darker"))

    assert seen["instruction"] == "Darker"
    assert seen["currentSite"]["metadata"]["title"] == "Acme Rockets"


def test_server_error_message_is_surfaced():
    def handler(request):
        return httpx.Response(500, json={"error": "Failed to refine the current design."})

    with pytest.raises(GenerationFailure, match="Failed to refine the current design."):
        run_with(handler, lambda c: c.generate("Bakery"))


def test_error_without_body_uses_fallback(site):
    def handler(request):
        return httpx.Response(502, text="Bad Gateway")

    with pytest.raises(PersistenceFailure, match="Failed to save website"):
        run_with(handler, lambda c: c.save_site(site))


def test_transport_error_maps_to_failure():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(PersistenceFailure, match="unreachable"):
        run_with(handler, lambda c: c.list_sites())


def test_not_found_maps_to_site_not_found(site):
    def handler(request):
        return httpx.Response(404, json={"error": "Site not found."})

    with pytest.raises(SiteNotFound):
        run_with(handler, lambda c: c.save_site(site))


def test_invalid_document_in_response_is_a_failure():
    def handler(request):
        return httpx.Response(200, json={"metadata": {"title": "x"}, "sections": []})

    with pytest.raises(GenerationFailure, match="invalid website document"):
        run_with(handler, lambda c: c.generate("Bakery"))


def test_list_sites(site_payload):
    saved = dict(site_payload, _id="a" * 20)

    def handler(request):
        return httpx.Response(200, json=[saved])

    sites = run_with(handler, lambda c: c.list_sites())
    assert [s.id for s in sites] == ["a" * 20]
