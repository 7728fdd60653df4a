from __future__ import annotations

import os
from typing import Mapping

from pydantic import BaseModel

from .errors import ConfigurationError


class Settings(BaseModel):
    environment: str = "dev"
    project_id: str | None = None
    api_key: str | None = None
    vertex_location: str = "us-central1"
    model_name: str = "gemini-2.5-pro"
    thinking_budget: int | None = 4000
    firestore_database: str = "(default)"
    sites_collection: str = "sites"

    @property
    def is_dev(self) -> bool:
        return self.environment == "dev"

    @property
    def use_vertexai(self) -> bool:
        return self.api_key is None


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Read service settings from the environment.

    Raises:
        ConfigurationError: when the model credential, or the document store
            project outside ``dev``, is missing.
    """
    env = os.environ if environ is None else environ

    def _get(name: str) -> str | None:
        value = env.get(name, "").strip()
        return value or None

    environment = _get("ENVIRONMENT") or "dev"
    project_id = _get("PROJECT_ID")
    api_key = _get("GOOGLE_API_KEY")

    missing = []
    if not api_key and not project_id:
        missing.append("GOOGLE_API_KEY or PROJECT_ID (model credential)")
    if environment != "dev" and not project_id:
        missing.append("PROJECT_ID (document store)")
    if missing:
        raise ConfigurationError(f"Missing configuration: {', '.join(missing)}")

    budget = _get("THINKING_BUDGET")
    try:
        thinking_budget = int(budget) if budget is not None else 4000
    except ValueError as exc:
        raise ConfigurationError(f"THINKING_BUDGET must be an integer, got {budget!r}") from exc

    return Settings(
        environment=environment,
        project_id=project_id,
        api_key=api_key,
        vertex_location=_get("VERTEX_LOCATION") or "us-central1",
        model_name=_get("MODEL_NAME") or "gemini-2.5-pro",
        thinking_budget=thinking_budget if thinking_budget > 0 else None,
        firestore_database=_get("FIRESTORE_DATABASE") or "(default)",
        sites_collection=_get("SITES_COLLECTION") or "sites",
    )


__all__ = ["Settings", "load_settings"]
