from __future__ import annotations

import re
import threading
import uuid
from datetime import datetime, timezone
from typing import Dict, Protocol

from .errors import SiteNotFound
from .models.site import WebsiteDocument

RECENT_SITES_LIMIT = 6

# Firestore auto-generated document ids: 20 alphanumeric characters.
_SITE_ID_RE = re.compile(r"^[A-Za-z0-9]{20}$")


def is_valid_site_id(site_id: str | None) -> bool:
    return bool(site_id) and _SITE_ID_RE.match(site_id) is not None


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SiteStore(Protocol):
    def save_site(self, site: WebsiteDocument) -> WebsiteDocument:
        ...

    def get_site(self, site_id: str) -> WebsiteDocument:
        ...

    def list_recent(self, *, limit: int = RECENT_SITES_LIMIT) -> list[WebsiteDocument]:
        ...


class InMemorySiteStore:
    """Process-local store used in ``dev`` and in tests."""

    def __init__(self) -> None:
        self._sites: Dict[str, WebsiteDocument] = {}
        self._lock = threading.Lock()

    def save_site(self, site: WebsiteDocument) -> WebsiteDocument:
        with self._lock:
            now = utcnow()
            existing = self._sites.get(site.id) if is_valid_site_id(site.id) else None
            if existing is not None:
                stored = site.model_copy(
                    update={"created_at": existing.created_at, "updated_at": now}, deep=True
                )
            else:
                stored = site.model_copy(
                    update={"id": self._generate_id(), "created_at": now, "updated_at": now},
                    deep=True,
                )
            # Re-inserting keeps the dict ordered by last save.
            self._sites.pop(stored.id, None)
            self._sites[stored.id] = stored
            return stored.model_copy(deep=True)

    def get_site(self, site_id: str) -> WebsiteDocument:
        with self._lock:
            site = self._sites.get(site_id)
            if site is None:
                raise SiteNotFound(f"Site {site_id} not found.")
            return site.model_copy(deep=True)

    def list_recent(self, *, limit: int = RECENT_SITES_LIMIT) -> list[WebsiteDocument]:
        with self._lock:
            newest_first = list(reversed(self._sites.values()))
            return [site.model_copy(deep=True) for site in newest_first[:limit]]

    def __len__(self) -> int:
        with self._lock:
            return len(self._sites)

    def _generate_id(self) -> str:
        while True:
            site_id = uuid.uuid4().hex[:20]
            if site_id not in self._sites:
                return site_id


__all__ = ["SiteStore", "InMemorySiteStore", "RECENT_SITES_LIMIT", "is_valid_site_id"]
