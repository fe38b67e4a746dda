"""Search term to result set lifecycle for one session.

``QueryPipeline`` owns the session's ``QueryState``. Term changes are handled
synchronously; the network fetch runs as a task on the running event loop and
its completion is applied back to the state on the same loop, so no locking is
needed. Every request is tagged with a generation number and only the latest
generation may update the state.
"""

import asyncio
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Awaitable, Callable, Optional

import httpx

from flickr_search.app.config import CLEAR_RESULTS_ON_SEARCH, FLICKR_FEED_URL
from flickr_search.app.decoder import DecodeFailure, decode
from flickr_search.app.errors import FeedError, InvalidUrlError
from flickr_search.app.feed import build_feed_url, fetch_feed, format_tags
from flickr_search.app.image_models import ImageRecord

logger = logging.getLogger(__name__)

Transport = Callable[[httpx.URL], Awaitable[bytes]]
Listener = Callable[["QueryState"], None]


class PipelineStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class QueryState:
    search_term: str = ""
    status: PipelineStatus = PipelineStatus.IDLE
    results: tuple[ImageRecord, ...] = field(default_factory=tuple)
    error: Optional[str] = None

    @property
    def is_loading(self) -> bool:
        return self.status is PipelineStatus.LOADING


class QueryPipeline:
    def __init__(
        self,
        transport: Optional[Transport] = None,
        feed_url: str = FLICKR_FEED_URL,
        clear_results_on_search: bool = CLEAR_RESULTS_ON_SEARCH,
    ):
        self.transport = transport or fetch_feed
        self.feed_url = feed_url
        self.clear_results_on_search = clear_results_on_search
        self._state = QueryState()
        self._generation = 0
        self._current_task: Optional[asyncio.Task] = None
        self._tasks: set[asyncio.Task] = set()
        self._listeners: list[Listener] = []

    @property
    def state(self) -> QueryState:
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` with every new state snapshot"""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, **changes) -> None:
        self._state = replace(self._state, **changes)
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception:
                logger.exception("[pipeline] State listener failed")

    def set_search_term(self, term: str) -> None:
        """Replace the search term and start a fetch for it.

        A term without any words moves the pipeline to idle without fetching.
        Previous fetches are not cancelled; their completions are ignored.
        """
        self._generation += 1
        generation = self._generation
        self._current_task = None

        tags = format_tags(term)
        if not tags:
            logger.debug("[pipeline] Empty search term, going idle")
            self._publish(search_term=term, status=PipelineStatus.IDLE, error=None)
            return

        try:
            url = build_feed_url(tags, self.feed_url)
        except InvalidUrlError as e:
            logger.warning(f"[pipeline] {e}")
            self._publish(
                search_term=term, status=PipelineStatus.FAILED, error=str(e)
            )
            return

        loop = asyncio.get_running_loop()

        changes = {}
        if self.clear_results_on_search:
            changes["results"] = ()
        self._publish(
            search_term=term, status=PipelineStatus.LOADING, error=None, **changes
        )

        task = loop.create_task(self._fetch(url, generation))
        self._current_task = task
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _fetch(self, url: httpx.URL, generation: int) -> None:
        try:
            payload = await self.transport(url)
        except FeedError as e:
            self._complete_failed(generation, str(e))
            return
        except Exception as e:
            logger.exception(f"[pipeline] Unexpected error fetching {url}")
            self._complete_failed(generation, f"Unexpected error: {e}")
            return

        result = decode(payload)
        if isinstance(result, DecodeFailure):
            self._complete_failed(generation, str(result.error))
            return

        if generation != self._generation:
            logger.debug(
                f"[pipeline] Discarding stale results of generation {generation}"
            )
            return

        logger.info(
            f"[pipeline] {len(result.records)} results for {self._state.search_term!r}"
        )
        self._publish(
            status=PipelineStatus.SUCCESS, results=tuple(result.records), error=None
        )

    def _complete_failed(self, generation: int, message: str) -> None:
        if generation != self._generation:
            logger.debug(
                f"[pipeline] Discarding stale failure of generation {generation}: {message}"
            )
            return
        logger.warning(f"[pipeline] Fetch failed: {message}")
        self._publish(status=PipelineStatus.FAILED, error=message)

    async def search(self, term: str) -> QueryState:
        """Set ``term`` and wait for the fetch it started, if any"""
        self.set_search_term(term)
        if self._current_task is not None:
            await asyncio.shield(self._current_task)
        return self._state

    async def wait_idle(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def find(self, record_id: str) -> Optional[ImageRecord]:
        return next((r for r in self._state.results if r.id == record_id), None)

    def close(self) -> None:
        """Cancel pending fetches and drop listeners at the end of a session"""
        self._generation += 1
        for task in list(self._tasks):
            if not task.done():
                task.cancel()
        self._listeners.clear()
