from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from .errors import GenerationFailure, LuminaError, PersistenceFailure, SiteNotFound, ValidationFailure
from .models.site import WebsiteDocument

logger = logging.getLogger(__name__)


def _to_document(data: Any, *, failure: type[LuminaError]) -> WebsiteDocument:
    try:
        return WebsiteDocument.model_validate(data)
    except ValidationError as exc:
        raise failure("Backend returned an invalid website document") from exc


class SiteBuilderClient:
    """Async client for the Lumina Builder HTTP API."""

    def __init__(
        self,
        *,
        base_url: str = "http://localhost:8000",
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        # Generation can take minutes; no timeout unless the caller asks for one.
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "SiteBuilderClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def generate(self, prompt: str) -> WebsiteDocument:
        data = await self._request(
            "POST",
            "/api/generate",
            json={"prompt": prompt},
            failure=GenerationFailure,
            fallback="Failed to generate website",
        )
        return _to_document(data, failure=GenerationFailure)

    async def refine(self, current: WebsiteDocument, instruction: str) -> WebsiteDocument:
        data = await self._request(
            "POST",
            "/api/refine",
            json={"currentSite": current.to_wire(), "instruction": instruction},
            failure=GenerationFailure,
            fallback="Failed to refine website",
        )
        return _to_document(data, failure=GenerationFailure)

    async def save_site(self, site: WebsiteDocument) -> WebsiteDocument:
        data = await self._request(
            "POST",
            "/api/sites",
            json=site.to_wire(),
            failure=PersistenceFailure,
            fallback="Failed to save website",
        )
        return _to_document(data, failure=PersistenceFailure)

    async def list_sites(self) -> list[WebsiteDocument]:
        data = await self._request(
            "GET",
            "/api/sites",
            failure=PersistenceFailure,
            fallback="Failed to load sites",
        )
        return [_to_document(item, failure=PersistenceFailure) for item in data]

    async def _request(
        self,
        method: str,
        url: str,
        *,
        failure: type[LuminaError],
        fallback: str,
        json: Any = None,
    ) -> Any:
        try:
            response = await self._client.request(method, url, json=json)
        except httpx.HTTPError as exc:
            logger.warning("Backend unreachable", extra={"url": url, "error": str(exc)})
            raise failure(f"{fallback}: backend unreachable") from exc

        if response.is_success:
            try:
                return response.json()
            except ValueError as exc:
                raise failure(f"{fallback}: malformed response") from exc

        try:
            body = response.json()
        except ValueError:
            body = None
        message = (body.get("error") if isinstance(body, dict) else None) or fallback

        if response.status_code == 404:
            raise SiteNotFound(message)
        if response.status_code == 422:
            raise ValidationFailure(message)
        raise failure(message)


__all__ = ["SiteBuilderClient"]
