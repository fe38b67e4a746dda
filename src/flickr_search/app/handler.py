import asyncio
import logging
from typing import Optional

from flickr_search.app.normalizers import image_detail
from flickr_search.app.pipeline import QueryPipeline, QueryState
from flickr_search.protocol import (
    ErrorMessage,
    ImageDetailMessage,
    SearchWebSocket,
    ServerMessage,
    StateData,
    StateMessage,
)

logger = logging.getLogger(__name__)


class Handler:
    """Binds one websocket session to its own query pipeline.

    Outgoing messages go through a queue drained by a single sender task, so
    state pushes triggered by fetch completions never interleave with replies.
    """

    def __init__(
        self, sender: SearchWebSocket, pipeline: Optional[QueryPipeline] = None
    ):
        self.socket = sender
        self.pipeline = pipeline or QueryPipeline()
        self.outbox: asyncio.Queue[ServerMessage] = asyncio.Queue()
        self.sender_task: Optional[asyncio.Task] = None
        self._unsubscribe = self.pipeline.subscribe(self._on_state)

    def start(self) -> None:
        self.sender_task = asyncio.create_task(self._drain())
        self._on_state(self.pipeline.state)

    def _on_state(self, state: QueryState) -> None:
        self.outbox.put_nowait(
            StateMessage(type="STATE", data=StateData.from_state(state))
        )

    async def _drain(self) -> None:
        while True:
            message = await self.outbox.get()
            await self.socket.send_json(message)

    def send_error(self, message: str) -> None:
        self.outbox.put_nowait(ErrorMessage(type="ERROR", data=message))

    def search(self, term: str) -> None:
        self.pipeline.set_search_term(term)

    def fetch_detail(self, record_id: str) -> None:
        record = self.pipeline.find(record_id)
        if record is None:
            logger.error(f"[ws] [resp] Image {record_id} not in current results")
            self.send_error("Image not found")
            return

        self.outbox.put_nowait(
            ImageDetailMessage(type="IMAGE_DETAIL", data=image_detail(record))
        )

    def cancel_tasks(self) -> None:
        self._unsubscribe()
        self.pipeline.close()
        if self.sender_task and not self.sender_task.done():
            self.sender_task.cancel()
