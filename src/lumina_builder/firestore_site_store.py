from __future__ import annotations

import logging
from typing import Any

from google.api_core import exceptions as google_exceptions
from google.cloud import firestore
from pydantic import ValidationError

from .errors import PersistenceFailure, SiteNotFound
from .models.site import WebsiteDocument
from .site_store import RECENT_SITES_LIMIT, is_valid_site_id, utcnow

logger = logging.getLogger(__name__)


class FirestoreSiteStore:
    """Firestore-backed site store for production use."""

    def __init__(
        self,
        project_id: str | None = None,
        *,
        database: str = "(default)",
        collection: str = "sites",
        client: firestore.Client | None = None,
    ) -> None:
        self._db = client or firestore.Client(project=project_id, database=database)
        self._collection = self._db.collection(collection)

    def save_site(self, site: WebsiteDocument) -> WebsiteDocument:
        """Update the site in place when its id exists, otherwise create it."""
        now = utcnow()
        try:
            doc_ref = None
            created_at = now
            if is_valid_site_id(site.id):
                candidate = self._collection.document(site.id)
                snapshot = candidate.get()
                if snapshot.exists:
                    doc_ref = candidate
                    created_at = snapshot.to_dict().get("created_at") or now

            if doc_ref is None:
                doc_ref = self._collection.document()

            doc_ref.set(self._to_firestore_dict(site, created_at=created_at, updated_at=now))
        except google_exceptions.GoogleAPIError as exc:
            logger.error("Failed to save site", exc_info=True, extra={"site_id": site.id})
            raise PersistenceFailure("Could not save project to the document store.") from exc

        logger.info(
            "Saved site",
            extra={
                "site_id": doc_ref.id,
                "updated": doc_ref.id == site.id,
                "sections_count": len(site.sections),
            },
        )
        return site.model_copy(
            update={"id": doc_ref.id, "created_at": created_at, "updated_at": now}
        )

    def get_site(self, site_id: str) -> WebsiteDocument:
        if not is_valid_site_id(site_id):
            raise SiteNotFound(f"Site {site_id} not found.")
        try:
            snapshot = self._collection.document(site_id).get()
        except google_exceptions.GoogleAPIError as exc:
            logger.error("Failed to load site", exc_info=True, extra={"site_id": site_id})
            raise PersistenceFailure("Failed to retrieve project.") from exc

        if not snapshot.exists:
            raise SiteNotFound(f"Site {site_id} not found.")
        return self._from_firestore_dict(snapshot.id, snapshot.to_dict())

    def list_recent(self, *, limit: int = RECENT_SITES_LIMIT) -> list[WebsiteDocument]:
        query = self._collection.order_by(
            "updated_at", direction=firestore.Query.DESCENDING
        ).limit(limit)
        try:
            snapshots = list(query.stream())
        except google_exceptions.GoogleAPIError as exc:
            logger.error("Failed to list sites", exc_info=True)
            raise PersistenceFailure("Failed to retrieve projects.") from exc

        sites = []
        for snapshot in snapshots:
            try:
                sites.append(self._from_firestore_dict(snapshot.id, snapshot.to_dict()))
            except ValidationError:
                logger.warning("Skipping unreadable site", extra={"site_id": snapshot.id})
        return sites

    def _to_firestore_dict(self, site: WebsiteDocument, *, created_at, updated_at) -> dict[str, Any]:
        data = site.content_dump()
        data["created_at"] = created_at
        data["updated_at"] = updated_at
        return data

    def _from_firestore_dict(self, site_id: str, data: dict[str, Any]) -> WebsiteDocument:
        return WebsiteDocument.model_validate(
            {
                "_id": site_id,
                "metadata": data["metadata"],
                "sections": data["sections"],
                "createdAt": data.get("created_at"),
                "updatedAt": data.get("updated_at"),
            }
        )


__all__ = ["FirestoreSiteStore"]
