from __future__ import annotations

import json
import logging
from typing import Any, Mapping

from google import genai
from google.genai import types

logger = logging.getLogger(__name__)


def parse_json_text(text: str) -> Any:
    """Parse a model response as JSON, unwrapping Markdown code fences.

    Raises:
        ValueError: when the text is not valid JSON.
    """
    response = text.strip()
    if response.startswith("```json"):
        response = response[7:]
    elif response.startswith("```"):
        response = response[3:]
    if response.endswith("```"):
        response = response[:-3]

    try:
        return json.loads(response.strip())
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON response: {exc}") from exc


class GenAIAdapter:
    """Adapter for Gemini models through the google-genai SDK."""

    def __init__(
        self,
        *,
        model_name: str,
        project_id: str | None = None,
        location: str = "us-central1",
        api_key: str | None = None,
        thinking_budget: int | None = None,
        client: genai.Client | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            model_name: Model name (e.g., "gemini-2.5-pro")
            project_id: GCP project ID, used for Vertex AI when no API key is given
            location: Vertex AI location
            api_key: Gemini API key
            thinking_budget: Optional thinking token budget
            client: Pre-built client, mainly for tests
        """
        self.model_name = model_name
        self.thinking_budget = thinking_budget

        if client is not None:
            self.client = client
        elif api_key:
            self.client = genai.Client(api_key=api_key)
        else:
            self.client = genai.Client(vertexai=True, project=project_id, location=location)

    def generate_json(
        self,
        contents: str,
        *,
        system_instruction: str,
        response_schema: Mapping[str, Any],
        temperature: float = 0.7,
        max_output_tokens: int = 32768,
    ) -> Any:
        """Generate a response constrained to ``response_schema`` and parse it.

        Returns:
            Parsed JSON response
        """
        thinking_config = None
        if self.thinking_budget:
            thinking_config = types.ThinkingConfig(thinking_budget=self.thinking_budget)

        config = types.GenerateContentConfig(
            system_instruction=system_instruction,
            temperature=temperature,
            max_output_tokens=max_output_tokens,
            response_mime_type="application/json",
            response_schema=dict(response_schema),
            thinking_config=thinking_config,
        )

        response = self.client.models.generate_content(
            model=self.model_name,
            contents=contents,
            config=config,
        )
        generated_text = response.text or ""

        logger.info(
            "Generated content with Gemini",
            extra={
                "model": self.model_name,
                "temperature": temperature,
                "input_length": len(contents),
                "output_length": len(generated_text),
            },
        )

        try:
            return parse_json_text(generated_text)
        except ValueError:
            logger.error(
                "Failed to parse JSON response",
                exc_info=True,
                extra={"response_preview": generated_text[:500]},
            )
            raise


__all__ = ["GenAIAdapter", "parse_json_text"]
