from dataclasses import dataclass
from typing import Annotated, List, Literal, Optional, Union

from fastapi import WebSocket
from pydantic import Field, TypeAdapter

from flickr_search.app.image_models import ImageRecord
from flickr_search.app.normalizers import ImageDetail
from flickr_search.app.pipeline import QueryState

WS_CHANNEL_ADDRESS: str = "/ws"


@dataclass
class StateData:
    search_term: str
    status: str
    is_loading: bool
    results: List[ImageRecord]
    error: Optional[str] = None

    @classmethod
    def from_state(cls, state: QueryState) -> "StateData":
        return cls(
            search_term=state.search_term,
            status=state.status.value,
            is_loading=state.is_loading,
            results=list(state.results),
            error=state.error,
        )


@dataclass
class SearchMessage:
    type: Literal["SEARCH"]
    data: str


@dataclass
class FetchDetailMessage:
    type: Literal["FETCH_DETAIL"]
    data: str


@dataclass
class ErrorMessage:
    type: Literal["ERROR"]
    data: str


@dataclass
class StateMessage:
    type: Literal["STATE"]
    data: StateData


@dataclass
class ImageDetailMessage:
    type: Literal["IMAGE_DETAIL"]
    data: ImageDetail


ClientMessage = Annotated[
    Union[SearchMessage, FetchDetailMessage],
    Field(discriminator="type"),
]

ServerMessage = Annotated[
    Union[ErrorMessage, StateMessage, ImageDetailMessage],
    Field(discriminator="type"),
]

_ClientMessageAdapter = TypeAdapter(ClientMessage)
_ServerMessageAdapter = TypeAdapter(ServerMessage)


def dump_server_message(message: ServerMessage) -> dict:
    return _ServerMessageAdapter.dump_python(message, mode="json")


class SearchWebSocket(WebSocket):
    async def receive_json(self, mode: str = "text") -> ClientMessage:
        data = await super().receive_json(mode=mode)
        return _ClientMessageAdapter.validate_python(data)

    async def send_json(self, data: ServerMessage, mode: str = "text") -> None:
        await super().send_json(dump_server_message(data), mode=mode)
