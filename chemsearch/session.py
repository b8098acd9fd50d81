from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional, Set

from .config import PubChemSettings, SearchSettings, load_app_config
from .debounce import Debouncer
from .pubchem import LookupService, PubChemClient
from .resolve import CompoundResolver
from .types import CompoundRecord, CompoundUpdate, SessionSnapshot

logger = logging.getLogger(__name__)


class SearchSession:
    """State of one compound search screen.

    Owns the live query, its debounced projection, the suggestion list and
    the resolved compound. Suggestion fetches are last-write-wins; compound
    resolutions are tagged with a generation and stale completions are
    dropped.

    ``update_query`` never fails on an open session. Called without a
    running event loop it updates the query and its debounced value at
    once and fetches no suggestions.
    """

    def __init__(self, service: LookupService, settings: Optional[SearchSettings] = None):
        self.service = service
        self.settings = settings or SearchSettings()
        self.resolver = CompoundResolver(service)

        self.query = ""
        self.suggestions: List[str] = []
        self.compound: Optional[CompoundRecord] = None
        self.is_loading = False
        self.error: Optional[str] = None

        self._generation = 0
        self._tasks: Set[asyncio.Task] = set()
        self._debouncer: Debouncer[str] = Debouncer(
            self.settings.debounce_seconds, self._on_debounced_query, initial=""
        )
        self._closed = False

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]] = None) -> "SearchSession":
        config = load_app_config() if config is None else config
        service = PubChemClient(PubChemSettings.from_config(config))
        return cls(service, SearchSettings.from_config(config))

    async def __aenter__(self) -> "SearchSession":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    @property
    def debounced_query(self) -> str:
        return self._debouncer.value

    @property
    def generation(self) -> int:
        return self._generation

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            query=self.query,
            debounced_query=self.debounced_query,
            suggestions=list(self.suggestions),
            compound=self.compound,
            is_loading=self.is_loading,
            error=self.error,
        )

    def update_query(self, text: str) -> None:
        self._ensure_open()
        self.query = text
        if not text:
            self.suggestions = []
        self._debouncer.push(text)

    def select_suggestion(self, suggestion: str) -> asyncio.Task:
        """Clear the box and resolve ``suggestion`` without waiting on the debouncer."""

        self.update_query("")
        return self._spawn(self._resolve(suggestion))

    async def submit_query(self, override: Optional[str] = None) -> Optional[CompoundRecord]:
        self._ensure_open()
        return await self._resolve(override)

    async def _resolve(self, override: Optional[str]) -> Optional[CompoundRecord]:
        # Live query, never the debounced one, which may lag behind.
        text = (override or self.query).strip()
        self._generation += 1
        generation = self._generation
        self.is_loading = True
        self.error = None
        logger.info("Resolving %r (generation %s)", text, generation)

        try:
            if not text:
                self.compound = None
                return None
            record = await self.resolver.resolve(
                text,
                on_identifier=lambda cid: self._start_record(generation, cid),
                on_update=lambda update: self._apply_update(generation, update),
            )
            if generation != self._generation:
                logger.debug("Discarding stale resolution of %r", text)
                return record
            if record is None:
                self.compound = None
                self.error = f"No compound found for '{text}'."
            else:
                self.compound = record
            return record
        finally:
            if generation == self._generation:
                self.is_loading = False

    async def drain(self) -> None:
        """Wait for the pending debounce timer and every background task."""

        while self._debouncer.pending or self._tasks:
            await asyncio.sleep(0)
            if self._tasks:
                await asyncio.gather(*list(self._tasks), return_exceptions=True)
            elif self._debouncer.pending:
                await asyncio.sleep(self._debouncer.delay / 4)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._debouncer.cancel()
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
        logger.debug("Search session closed")

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("Search session is closed.")

    def _on_debounced_query(self, value: str) -> None:
        self.error = None
        if value:
            self._spawn(self._fetch_suggestions(value))

    async def _fetch_suggestions(self, text: str) -> None:
        try:
            suggestions = await self.service.autocomplete(text, limit=self.settings.suggestion_limit)
        except Exception as exc:
            logger.warning("Suggestion lookup for %r failed: %s", text, exc)
            suggestions = []
        self.suggestions = suggestions

    def _start_record(self, generation: int, cid: int) -> None:
        if generation == self._generation:
            self.compound = CompoundRecord(cid=cid)

    def _apply_update(self, generation: int, update: CompoundUpdate) -> None:
        # No await between read and write: atomic on the event loop.
        if generation == self._generation and self.compound is not None:
            self.compound = self.compound.model_copy(update=update)

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Background search task failed", exc_info=task.exception())
