import copy

import pytest
from fastapi.testclient import TestClient

from conftest import FakeModel
from lumina_builder.api import create_app
from lumina_builder.errors import PersistenceFailure
from lumina_builder.gateway import GenerationGateway
from lumina_builder.site_store import InMemorySiteStore


class FailingStore(InMemorySiteStore):
    def save_site(self, site):
        raise PersistenceFailure("Could not save project to the document store.")

    def list_recent(self, *, limit=6):
        raise PersistenceFailure("Failed to retrieve projects.")


def make_client(*responses, store=None):
    model = FakeModel(*responses)
    app = create_app(gateway=GenerationGateway(model), store=store if store is not None else InMemorySiteStore())
    return TestClient(app), model


def test_health_reports_engine():
    client, _ = make_client()
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "engine": "fake-gemini"}


def test_generate_returns_document(site_payload):
    client, model = make_client(site_payload)
    response = client.post("/api/generate", json={"prompt": "A rocket company"})

    assert response.status_code == 200
    body = response.json()
    assert "_id" not in body
    assert [s["id"] for s in body["sections"]] == ["nav-1", "hero-1", "footer-1"]
    assert body["metadata"]["primaryColor"] == "#2563eb"
    assert len(model.calls) == 1


def test_generate_failure_is_500_with_error():
    client, _ = make_client(RuntimeError("upstream"))
    response = client.post("/api/generate", json={"prompt": "A rocket company"})

    assert response.status_code == 500
    assert response.json() == {"error": "AI engine failed to produce a valid design. Please retry."}


def test_blank_prompt_is_rejected_without_model_call():
    client, model = make_client()
    response = client.post("/api/generate", json={"prompt": "   "})

    assert response.status_code == 422
    assert "error" in response.json()
    assert model.calls == []


def test_missing_prompt_is_422_with_error():
    client, _ = make_client()
    response = client.post("/api/generate", json={})

    assert response.status_code == 422
    assert response.json()["error"].startswith("Invalid request")


def test_refine_replaces_document(site_payload):
    refined = copy.deepcopy(site_payload)
    refined["metadata"]["title"] = "Acme Orbital"
    client, model = make_client(refined)

    response = client.post(
        "/api/refine",
        json={"currentSite": site_payload, "instruction": "Rename to Acme Orbital"},
    )

    assert response.status_code == 200
    assert response.json()["metadata"]["title"] == "Acme Orbital"
    assert "Rename to Acme Orbital" in model.calls[0]["contents"]


def test_refine_failure_message(site_payload):
    client, _ = make_client(ValueError("bad json"))
    response = client.post(
        "/api/refine", json={"currentSite": site_payload, "instruction": "Add pricing"}
    )

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to refine the current design."}


def test_save_twice_keeps_single_document(site_payload):
    store = InMemorySiteStore()
    client, _ = make_client(store=store)

    first = client.post("/api/sites", json=site_payload).json()
    second = client.post("/api/sites", json=first).json()

    assert second["_id"] == first["_id"]
    assert len(store) == 1
    assert "createdAt" in second and "updatedAt" in second


def test_save_then_list_orders_newest_first(site_payload):
    client, _ = make_client()
    first = client.post("/api/sites", json=site_payload).json()
    second = client.post("/api/sites", json=site_payload).json()

    ids = [site["_id"] for site in client.get("/api/sites").json()]
    assert ids.index(second["_id"]) < ids.index(first["_id"])


def test_save_rejects_invalid_document(site_payload):
    site_payload["sections"] = []
    client, _ = make_client()
    response = client.post("/api/sites", json=site_payload)

    assert response.status_code == 422
    assert "sections" in response.json()["error"]


def test_store_failures_are_500():
    client, _ = make_client(store=FailingStore())

    assert client.get("/api/sites").status_code == 500
    response = client.post(
        "/api/sites",
        json={
            "metadata": {"title": "Acme"},
            "sections": [{"id": "s1", "type": "hero", "html": "<p>A</p>"}],
        },
    )
    assert response.status_code == 500
    assert response.json() == {"error": "Could not save project to the document store."}


def test_get_site_and_missing_site(site_payload):
    client, _ = make_client()
    saved = client.post("/api/sites", json=site_payload).json()

    assert client.get(f"/api/sites/{saved['_id']}").json()["_id"] == saved["_id"]
    missing = client.get("/api/sites/" + "0" * 20)
    assert missing.status_code == 404
    assert "error" in missing.json()


@pytest.mark.parametrize("saved", [False, True])
def test_export_downloads_html(site_payload, saved):
    client, _ = make_client()
    if saved:
        site_id = client.post("/api/sites", json=site_payload).json()["_id"]
        response = client.get(f"/api/sites/{site_id}/export")
    else:
        response = client.post("/api/export", json=site_payload)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert response.headers["content-disposition"] == 'attachment; filename="acme-rockets.html"'
    assert response.text.startswith("<!DOCTYPE html>")


def test_preview_embeds_sandboxed_frame(site_payload):
    client, _ = make_client()
    response = client.post("/api/preview", params={"viewport": "mobile"}, json=site_payload)

    assert response.status_code == 200
    assert 'sandbox="allow-scripts"' in response.text
    assert "preview-viewport--mobile" in response.text


def test_preview_rejects_unknown_viewport(site_payload):
    client, _ = make_client()
    response = client.post("/api/preview", params={"viewport": "watch"}, json=site_payload)
    assert response.status_code == 422


def test_trace_id_is_echoed_from_cloud_trace_header():
    client, _ = make_client()
    response = client.get(
        "/api/health", headers={"X-Cloud-Trace-Context": "105445aa7843bc8bf206b12000100000/1;o=1"}
    )
    assert response.headers["X-Trace-Id"] == "105445aa7843bc8bf206b12000100000"


def test_trace_id_is_generated_per_request():
    client, _ = make_client()
    first = client.get("/api/health").headers["X-Trace-Id"]
    second = client.get("/api/sites").headers["X-Trace-Id"]

    assert first and second
    assert first != second
