from enum import Enum
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, Field

from .state import SessionState


CAPACITY_MESSAGE = "We are currently at capacity for this demo. Please try again later."


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    CAPACITY = "capacity"
    TRANSPORT = "transport"
    JOIN = "join"


class RoomDescriptor(BaseModel):
    url: Optional[str] = None
    token: Optional[str] = None


class SessionConfig(BaseModel):
    start_audio_off: bool = Field(default=False)


class Success(BaseModel):
    kind: Literal["success"] = "success"
    url: str
    token: str


class CapacityExceeded(BaseModel):
    kind: Literal["capacity_exceeded"] = "capacity_exceeded"
    detail: Optional[str] = None


class TransportFailure(BaseModel):
    kind: Literal["transport_failure"] = "transport_failure"
    reason: str = ""


ProvisioningOutcome = Union[Success, CapacityExceeded, TransportFailure]


class RoomResult(BaseModel):
    url: str = Field(min_length=1)
    token: str


class CreateRoomResponse(BaseModel):
    result: Optional[RoomResult] = None
    error: Any = None
    detail: Any = None


class RoomChoice(BaseModel):
    room_url: Optional[str] = None


class SessionView(BaseModel):
    state: SessionState
    title: str = ""
    status_text: Optional[str] = None
    busy: bool = False
    proceed_enabled: bool = False
    start_enabled: bool = False
    room_error: bool = False
    room_url_from_query: Optional[str] = None
    room_url_from_query_valid: bool = False
    server_url: Optional[str] = None
    capacity_error: Optional[str] = None
    help_url: Optional[str] = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    open_mic: bool = False
    start_audio_off: bool = False
