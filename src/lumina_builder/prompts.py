from __future__ import annotations

import json
from typing import Any, Mapping

from .models.site import SectionType, WebsiteDocument

SYSTEM_INSTRUCTION = """\
You are a master of modern web design and a senior Tailwind CSS developer.
Goal: Generate a high-performance, visually stunning landing page.
Rules:
1. Use semantic HTML5. Each section's html is a fragment: never include <html>, <head> or <body>.
2. Use Tailwind CSS utility classes for 100% of the styling.
3. Ensure sections are responsive (use sm:, md:, lg: variants).
4. Use placeholder images from https://picsum.photos/ sized by pixel dimensions (e.g. https://picsum.photos/800/600).
5. Aesthetics: clean, modern, plenty of whitespace, bold typography.
6. Give every section a short unique id and keep the ids of sections you do not change.
7. Return a valid JSON object matching the provided schema and nothing else.
"""

SITE_RESPONSE_SCHEMA: Mapping[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "metadata": {
            "type": "OBJECT",
            "properties": {
                "title": {"type": "STRING"},
                "description": {"type": "STRING"},
                "primaryColor": {"type": "STRING"},
                "fontFamily": {"type": "STRING"},
            },
            "required": ["title", "description", "primaryColor", "fontFamily"],
        },
        "sections": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "id": {"type": "STRING"},
                    "type": {"type": "STRING", "enum": [t.value for t in SectionType]},
                    "title": {"type": "STRING"},
                    "html": {
                        "type": "STRING",
                        "description": "Valid HTML string with Tailwind classes. No wrapper needed.",
                    },
                },
                "required": ["id", "type", "title", "html"],
            },
        },
    },
    "required": ["metadata", "sections"],
}


def build_generate_prompt(prompt: str) -> str:
    return f"Build a complete landing page for this business/idea: {prompt.strip()}"


def build_refine_prompt(current: WebsiteDocument, instruction: str) -> str:
    existing = json.dumps(current.content_dump(), ensure_ascii=False)
    return (
        "Update the following website based on user feedback. "
        "Return the complete updated website, not only the changed parts.\n"
        f"Feedback: {json.dumps(instruction.strip(), ensure_ascii=False)}\n"
        f"Existing Website: {existing}"
    )


__all__ = [
    "SYSTEM_INSTRUCTION",
    "SITE_RESPONSE_SCHEMA",
    "build_generate_prompt",
    "build_refine_prompt",
]
