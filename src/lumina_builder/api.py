from __future__ import annotations

import asyncio
import logging
import uuid

from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse, Response
from pydantic import BaseModel, Field

from .errors import (
    GenerationFailure,
    LuminaError,
    PersistenceFailure,
    SiteNotFound,
    ValidationFailure,
)
from .export import ExportedSite, export_site
from .gateway import GenerationGateway
from .logging_config import get_trace_id, set_trace_id
from .models.site import WebsiteDocument
from .preview import PreviewRenderer, ViewportMode, render_preview_page
from .site_store import RECENT_SITES_LIMIT, SiteStore

logger = logging.getLogger(__name__)

_STATUS_CODES: dict[type[LuminaError], int] = {
    GenerationFailure: 500,
    PersistenceFailure: 500,
    ValidationFailure: 422,
    SiteNotFound: 404,
}


class GenerateRequest(BaseModel):
    prompt: str


class RefineRequest(BaseModel):
    current_site: WebsiteDocument = Field(alias="currentSite")
    instruction: str

    class Config:
        populate_by_name = True


class HealthResponse(BaseModel):
    status: str
    engine: str


def _site_response(site: WebsiteDocument) -> JSONResponse:
    return JSONResponse(site.to_wire())


def _download_response(exported: ExportedSite) -> Response:
    return Response(
        content=exported.html,
        media_type=exported.media_type,
        headers={"Content-Disposition": f'attachment; filename="{exported.filename}"'},
    )


def create_app(*, gateway: GenerationGateway, store: SiteStore) -> FastAPI:
    app = FastAPI(title="Lumina Builder API", version="0.1.0")

    @app.middleware("http")
    async def trace_requests(request: Request, call_next):
        header = request.headers.get("X-Cloud-Trace-Context", "")
        set_trace_id(header.split("/")[0] or str(uuid.uuid4()))
        try:
            response = await call_next(request)
            response.headers["X-Trace-Id"] = get_trace_id() or ""
            return response
        finally:
            set_trace_id(None)

    @app.exception_handler(LuminaError)
    async def handle_lumina_error(request: Request, exc: LuminaError) -> JSONResponse:
        status_code = _STATUS_CODES.get(type(exc), 500)
        logger.warning(
            "Request failed",
            extra={"path": request.url.path, "error": exc.message, "status_code": status_code},
        )
        return JSONResponse({"error": exc.message}, status_code=status_code)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        first = exc.errors()[0] if exc.errors() else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        detail = first.get("msg", "invalid request")
        message = f"Invalid request: {location}: {detail}" if location else f"Invalid request: {detail}"
        return JSONResponse({"error": message}, status_code=422)

    @app.get("/api/health", response_model=HealthResponse)
    async def healthcheck() -> HealthResponse:
        return HealthResponse(status="ok", engine=gateway.engine)

    @app.post("/api/generate")
    async def generate_site(request: GenerateRequest) -> JSONResponse:
        site = await asyncio.to_thread(gateway.generate, request.prompt)
        return _site_response(site)

    @app.post("/api/refine")
    async def refine_site(request: RefineRequest) -> JSONResponse:
        site = await asyncio.to_thread(gateway.refine, request.current_site, request.instruction)
        return _site_response(site)

    @app.post("/api/sites")
    async def save_site(site: WebsiteDocument) -> JSONResponse:
        saved = await asyncio.to_thread(store.save_site, site)
        return _site_response(saved)

    @app.get("/api/sites")
    async def list_sites() -> JSONResponse:
        sites = await asyncio.to_thread(store.list_recent, limit=RECENT_SITES_LIMIT)
        return JSONResponse([site.to_wire() for site in sites])

    @app.get("/api/sites/{site_id}")
    async def get_site(site_id: str) -> JSONResponse:
        site = await asyncio.to_thread(store.get_site, site_id)
        return _site_response(site)

    @app.get("/api/sites/{site_id}/export")
    async def export_saved_site(site_id: str) -> Response:
        site = await asyncio.to_thread(store.get_site, site_id)
        return _download_response(export_site(site))

    @app.post("/api/export")
    async def export_document(site: WebsiteDocument) -> Response:
        return _download_response(export_site(site))

    @app.post("/api/preview", response_class=HTMLResponse)
    async def preview_document(
        site: WebsiteDocument,
        viewport: ViewportMode = Query(default=ViewportMode.desktop),
    ) -> HTMLResponse:
        surface = PreviewRenderer().render(site, viewport)
        return HTMLResponse(render_preview_page(surface, title=site.metadata.title))

    return app


__all__ = ["create_app", "GenerateRequest", "RefineRequest"]
