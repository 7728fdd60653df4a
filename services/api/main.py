from __future__ import annotations

import logging

from lumina_builder.api import create_app
from lumina_builder.firestore_site_store import FirestoreSiteStore
from lumina_builder.gateway import GenerationGateway
from lumina_builder.genai_adapter import GenAIAdapter
from lumina_builder.logging_config import setup_logging
from lumina_builder.settings import load_settings
from lumina_builder.site_store import InMemorySiteStore

# Configuration errors surface here, at import time, before serving.
settings = load_settings()

setup_logging(environment=settings.environment, project_id=settings.project_id)
logger = logging.getLogger(__name__)

model = GenAIAdapter(
    model_name=settings.model_name,
    project_id=settings.project_id,
    location=settings.vertex_location,
    api_key=settings.api_key,
    thinking_budget=settings.thinking_budget,
)

# Use Firestore in production, in-memory for dev
if settings.is_dev:
    store = InMemorySiteStore()
else:
    store = FirestoreSiteStore(
        project_id=settings.project_id,
        database=settings.firestore_database,
        collection=settings.sites_collection,
    )

app = create_app(gateway=GenerationGateway(model), store=store)

logger.info(
    "Lumina Builder API configured",
    extra={
        "environment": settings.environment,
        "engine": settings.model_name,
        "store": type(store).__name__,
        "vertexai": settings.use_vertexai,
    },
)
