from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any

import pytest

from lumina_builder.models.site import WebsiteDocument

FIXTURES = Path(__file__).parent / "fixtures"


def load_fixture(name: str) -> dict[str, Any]:
    return json.loads((FIXTURES / f"{name}.json").read_text(encoding="utf-8"))


class FakeModel:
    """Stands in for the Gemini adapter; replays queued payloads or errors."""

    model_name = "fake-gemini"

    def __init__(self, *responses: Any) -> None:
        self._responses = list(responses)
        self.calls: list[dict[str, Any]] = []

    def generate_json(self, contents, *, system_instruction, response_schema):
        self.calls.append(
            {
                "contents": contents,
                "system_instruction": system_instruction,
                "response_schema": response_schema,
            }
        )
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return copy.deepcopy(response)


@pytest.fixture
def site_payload() -> dict[str, Any]:
    return load_fixture("acme_site")


@pytest.fixture
def site(site_payload) -> WebsiteDocument:
    return WebsiteDocument.model_validate(site_payload)
