"""
Client-side request / cache / debounce flow.

``WebsiteGenerator`` keeps the UI responsive over a latent backend:

* keystrokes restart a debounce timer; short inputs clear the view instead
* a fresh cache hit renders immediately without touching the network
* on a miss, an optimistic guess from the shared rule table renders at once,
  then create + fetch-by-id replace it with the server's sections
* single flight: starting a request cancels the one still running, so only
  the newest result ever reaches the view

Everything runs on one asyncio loop; there is no locking.
"""
from __future__ import annotations

import asyncio
import dataclasses
import logging
from typing import Callable, List, Optional

from app.client.api import ClientError, ProjectsClient
from app.client.cache import SectionCache
from app.config import settings
from app.services.sections import derive_sections

logger = logging.getLogger(__name__)

EMPTY_IDEA_MESSAGE = "Please enter a website idea"


@dataclasses.dataclass
class GeneratorState:
    idea: str = ""
    sections: List[str] = dataclasses.field(default_factory=list)
    is_generating: bool = False
    error: Optional[str] = None
    # True while the sections shown are the local guess, not the server's
    is_optimistic: bool = False

    def snapshot(self) -> "GeneratorState":
        return dataclasses.replace(self, sections=list(self.sections))


RenderCallback = Callable[[GeneratorState], None]


class WebsiteGenerator:
    """One UI session: owns the input state, the debounce timer and the cache."""

    def __init__(
        self,
        api: ProjectsClient,
        cache: Optional[SectionCache] = None,
        debounce_seconds: Optional[float] = None,
        min_idea_length: Optional[int] = None,
        on_render: Optional[RenderCallback] = None,
    ) -> None:
        self.api = api
        self.cache = cache if cache is not None else SectionCache(
            ttl_seconds=settings.CACHE_TTL_SECONDS,
            max_entries=settings.CACHE_MAX_ENTRIES,
        )
        self.debounce_seconds = (
            debounce_seconds if debounce_seconds is not None else settings.DEBOUNCE_MS / 1000
        )
        self.min_idea_length = (
            min_idea_length if min_idea_length is not None else settings.MIN_IDEA_LENGTH
        )
        self.state = GeneratorState()
        self._on_render = on_render
        self._timer: Optional[asyncio.Task] = None
        self._inflight: Optional[asyncio.Task] = None

    # ------------------------------------------------------------------
    # Input handling
    # ------------------------------------------------------------------

    def on_input(self, text: str) -> None:
        """Handle one keystroke worth of input. Must be called on the event loop."""
        self.state.idea = text
        self._cancel_timer()

        if len(text.strip()) <= self.min_idea_length:
            self.state.sections = []
            self.state.error = None
            self.state.is_optimistic = False
            self._render()
            return

        self._timer = asyncio.get_running_loop().create_task(self._debounce(text.strip()))

    async def submit(self) -> None:
        """
        Manual submit: skip the debounce, run the lookup and wait for it.

        The input field is cleared once the lookup finishes, whatever the
        outcome.
        """
        idea = self.state.idea.strip()
        if not idea:
            self.state.error = EMPTY_IDEA_MESSAGE
            self._render()
            return

        self._cancel_timer()
        try:
            task = self._start_lookup(idea)
            if task is not None:
                # asyncio.wait does not raise if *task* gets superseded
                await asyncio.wait({task})
        finally:
            self.state.idea = ""
            self._render()

    async def lookup(self, idea: str) -> None:
        """Run the cache → optimistic → network flow for *idea* and wait for it."""
        task = self._start_lookup(idea.strip())
        if task is not None:
            await asyncio.wait({task})

    async def wait_idle(self) -> None:
        """Wait until no debounce timer is pending and no request is running."""
        while True:
            pending = [
                t for t in (self._timer, self._inflight)
                if t is not None and not t.done()
            ]
            if not pending:
                return
            await asyncio.wait(pending)

    async def aclose(self) -> None:
        tasks = [t for t in (self._timer, self._inflight) if t is not None]
        self._cancel_timer()
        self._cancel_inflight()
        if tasks:
            await asyncio.wait(tasks)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _debounce(self, idea: str) -> None:
        await asyncio.sleep(self.debounce_seconds)
        self._timer = None
        self._start_lookup(idea)

    def _start_lookup(self, idea: str) -> Optional[asyncio.Task]:
        cached = self.cache.get(idea)
        # whatever happens next supersedes the request still running
        self._cancel_inflight()

        if cached is not None:
            logger.debug("Cache hit for %r", idea)
            self.state.sections = cached
            self.state.is_optimistic = False
            self.state.is_generating = False
            self.state.error = None
            self._render()
            return None

        self.state.sections = derive_sections(idea)
        self.state.is_optimistic = True
        self.state.is_generating = True
        self.state.error = None
        self._render()

        task = asyncio.get_running_loop().create_task(self._fetch(idea))
        self._inflight = task
        return task

    async def _fetch(self, idea: str) -> None:
        try:
            created = await self.api.create_project(idea)
            fetched = await self.api.get_project(created.id)
        except asyncio.CancelledError:
            logger.debug("Request for %r superseded", idea)
            raise
        except ClientError as exc:
            logger.warning("Generating sections for %r failed: %s", idea, exc)
            # optimistic sections stay on screen
            self.state.error = str(exc)
            self.state.is_generating = False
            self._render()
            return
        except Exception as exc:
            logger.error("Unexpected error generating sections for %r", idea, exc_info=True)
            self.state.error = str(exc) or "Something went wrong"
            self.state.is_generating = False
            self._render()
            return
        finally:
            if self._inflight is asyncio.current_task():
                self._inflight = None

        self.cache.put(idea, fetched.sections)
        self.state.sections = list(fetched.sections)
        self.state.is_optimistic = False
        self.state.is_generating = False
        self.state.error = None
        self._render()

    def _cancel_timer(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    def _cancel_inflight(self) -> None:
        if self._inflight is not None and not self._inflight.done():
            self._inflight.cancel()
        self._inflight = None

    def _render(self) -> None:
        if self._on_render is not None:
            self._on_render(self.state.snapshot())
