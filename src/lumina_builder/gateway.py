from __future__ import annotations

import logging
from typing import Any, Mapping, Protocol

from pydantic import ValidationError

from .errors import GenerationFailure, ValidationFailure
from .models.site import GeneratedDocument, WebsiteDocument
from .prompts import (
    SITE_RESPONSE_SCHEMA,
    SYSTEM_INSTRUCTION,
    build_generate_prompt,
    build_refine_prompt,
)

logger = logging.getLogger(__name__)


class JsonModel(Protocol):
    model_name: str

    def generate_json(
        self,
        contents: str,
        *,
        system_instruction: str,
        response_schema: Mapping[str, Any],
    ) -> Any:
        ...


class GenerationGateway:
    """Generates and refines website documents with a schema-constrained model.

    Stateless: all context travels in the arguments of each call.
    """

    def __init__(self, model: JsonModel) -> None:
        self._model = model

    @property
    def engine(self) -> str:
        return self._model.model_name

    def generate(self, prompt: str) -> WebsiteDocument:
        if not prompt or not prompt.strip():
            raise ValidationFailure("Prompt must not be empty.")

        logger.info("Generating site", extra={"prompt_length": len(prompt)})
        return self._run(
            build_generate_prompt(prompt),
            failure_message="AI engine failed to produce a valid design. Please retry.",
        )

    def refine(self, current: WebsiteDocument, instruction: str) -> WebsiteDocument:
        if not instruction or not instruction.strip():
            raise ValidationFailure("Refinement instruction must not be empty.")

        logger.info(
            "Refining site",
            extra={
                "site_id": current.id,
                "sections_count": len(current.sections),
                "instruction_length": len(instruction),
            },
        )
        refined = self._run(
            build_refine_prompt(current, instruction),
            failure_message="Failed to refine the current design.",
        )
        # The replacement keeps the saved identity so later saves update in place.
        return refined.model_copy(update={"id": current.id, "created_at": current.created_at})

    def _run(self, contents: str, *, failure_message: str) -> WebsiteDocument:
        try:
            payload = self._model.generate_json(
                contents,
                system_instruction=SYSTEM_INSTRUCTION,
                response_schema=SITE_RESPONSE_SCHEMA,
            )
        except Exception as exc:
            logger.error("Model call failed", exc_info=True, extra={"engine": self.engine})
            raise GenerationFailure(failure_message) from exc

        if not isinstance(payload, dict):
            logger.error(
                "Unexpected JSON structure from model",
                extra={"payload_type": type(payload).__name__},
            )
            raise GenerationFailure(failure_message)

        # Model output is a draft; identity and timestamps belong to the store.
        for key in ("_id", "id", "createdAt", "updatedAt"):
            payload.pop(key, None)

        try:
            document = GeneratedDocument.model_validate(payload).to_document()
        except ValidationError as exc:
            logger.error(
                "Model output failed schema validation",
                extra={"errors": exc.errors(include_url=False, include_input=False)},
            )
            raise GenerationFailure(failure_message) from exc

        logger.info(
            "Model produced site",
            extra={"title": document.metadata.title, "sections_count": len(document.sections)},
        )
        return document


__all__ = ["GenerationGateway", "JsonModel"]
