from __future__ import annotations


class LuminaError(Exception):
    """Base class for failures surfaced to the user as a single message."""

    default_message = "Something went wrong."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class GenerationFailure(LuminaError):
    default_message = "AI engine failed to produce a valid design. Please retry."


class PersistenceFailure(LuminaError):
    default_message = "Could not save project."


class ValidationFailure(LuminaError):
    default_message = "Invalid website document."


class SiteNotFound(LuminaError):
    default_message = "Site not found."


class ConfigurationError(LuminaError):
    default_message = "Service is not configured."


__all__ = [
    "LuminaError",
    "GenerationFailure",
    "PersistenceFailure",
    "ValidationFailure",
    "SiteNotFound",
    "ConfigurationError",
]
