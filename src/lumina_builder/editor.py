"""Editor session state machine.

One session owns a single current document. States::

    idle --submit_prompt--> generating --ok--> editing
                                       --error--> idle
    editing --refine--> refining --> editing
    editing (+saving flag) --save--> editing

At most one backend call is in flight; while one is, the triggers report
themselves disabled and calling them is a no-op.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Protocol

from .errors import LuminaError
from .export import ExportedSite, export_site
from .models.site import SectionType, WebsiteDocument
from .preview import PreviewRenderer, PreviewSurface, ViewportMode

logger = logging.getLogger(__name__)


class EditorBackend(Protocol):
    async def generate(self, prompt: str) -> WebsiteDocument:
        ...

    async def refine(self, current: WebsiteDocument, instruction: str) -> WebsiteDocument:
        ...

    async def save_site(self, site: WebsiteDocument) -> WebsiteDocument:
        ...

    async def list_sites(self) -> list[WebsiteDocument]:
        ...


class EditorState(str, Enum):
    idle = "idle"
    generating = "generating"
    editing = "editing"
    refining = "refining"


class EditorOrchestrator:
    def __init__(self, backend: EditorBackend, *, renderer: PreviewRenderer | None = None) -> None:
        self._backend = backend
        self._renderer = renderer or PreviewRenderer()
        self.state = EditorState.idle
        self.current: WebsiteDocument | None = None
        self.saving = False
        self.viewport = ViewportMode.desktop
        self.recent_sites: list[WebsiteDocument] = []
        self.error: str | None = None
        self.notice: str | None = None

    @property
    def busy(self) -> bool:
        return self.saving or self.state in (EditorState.generating, EditorState.refining)

    @property
    def can_submit(self) -> bool:
        # Generation starts from idle only; reset() is the one discard path.
        return self.current is None and not self.busy

    @property
    def can_refine(self) -> bool:
        return self.current is not None and not self.busy

    @property
    def can_save(self) -> bool:
        return self.current is not None and not self.busy

    async def submit_prompt(self, prompt: str) -> None:
        if not prompt or not prompt.strip() or not self.can_submit:
            return

        self.state = EditorState.generating
        self.error = None
        try:
            site = await self._backend.generate(prompt)
        except LuminaError as exc:
            logger.warning("Generation failed", extra={"error": exc.message})
            self.state = EditorState.idle
            self.error = exc.message
            return

        self.current = site
        self.state = EditorState.editing

    async def refine(self, instruction: str) -> None:
        if not instruction or not instruction.strip() or not self.can_refine:
            return

        self.state = EditorState.refining
        self.error = None
        try:
            site = await self._backend.refine(self.current, instruction)
        except LuminaError as exc:
            logger.warning("Refinement failed", extra={"error": exc.message})
            self.error = exc.message
        else:
            self.current = site
        finally:
            self.state = EditorState.editing

    async def save(self) -> None:
        if not self.can_save:
            return

        self.saving = True
        self.error = None
        self.notice = None
        try:
            saved = await self._backend.save_site(self.current)
        except LuminaError as exc:
            logger.warning("Save failed", extra={"error": exc.message})
            self.error = "Database save failed. Check backend connection."
        else:
            self.current = saved
            self.notice = "Changes saved"
        finally:
            self.saving = False

    def reset(self, confirm: Callable[[], bool]) -> bool:
        """Discard the current document after ``confirm()`` agrees."""
        if self.busy or not confirm():
            return False
        self.current = None
        self.state = EditorState.idle
        self.error = None
        self.notice = None
        return True

    def select(self, site: WebsiteDocument) -> None:
        if self.busy:
            return
        self.current = site
        self.state = EditorState.editing
        self.error = None

    async def refresh_recent(self) -> list[WebsiteDocument]:
        try:
            self.recent_sites = await self._backend.list_sites()
        except LuminaError as exc:
            logger.error("Failed to load recent projects", extra={"error": exc.message})
        return self.recent_sites

    def outline(self) -> list[tuple[int, str, SectionType]]:
        """Numbered ``(position, id, type)`` entries of the current document, in order."""
        if self.current is None:
            return []
        return [
            (position, section.id, section.type)
            for position, section in enumerate(self.current.sections, start=1)
        ]

    def set_viewport(self, mode: ViewportMode | str) -> None:
        self.viewport = ViewportMode(mode)

    def dismiss_error(self) -> None:
        self.error = None

    def preview(self) -> PreviewSurface:
        return self._renderer.render(self.current, self.viewport)

    def export(self) -> ExportedSite | None:
        if self.current is None:
            return None
        return export_site(self.current)


__all__ = ["EditorBackend", "EditorOrchestrator", "EditorState"]
