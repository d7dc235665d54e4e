import asyncio
import logging
from typing import Optional, Protocol, Set

from .call import CallClient
from .config import Capabilities, ClientConfig
from .models import (
    CAPACITY_MESSAGE,
    CapacityExceeded,
    ErrorKind,
    ProvisioningOutcome,
    RoomDescriptor,
    SessionConfig,
    SessionView,
    Success,
)
from .observability import TransitionObserver
from .rooms import RoomResolver
from .state import BUSY_STATES, STATUS_TEXT, SessionState

logger = logging.getLogger("voice-client")


class TransitionError(RuntimeError):
    """A trigger was fired in a state that does not accept it."""


class Provisioner(Protocol):
    async def create_room(self) -> ProvisioningOutcome: ...

    async def start_bot(self, room_url: str, token: str) -> None: ...


class SessionOrchestrator:
    """Drives a user from room selection through provisioning into a live call.

    Provisioning and join failures are converted into state plus a message
    here; nothing raised by the collaborators escapes to the caller. Only one
    trigger may be outstanding at a time.
    """

    def __init__(
        self,
        config: ClientConfig,
        capabilities: Capabilities,
        call: CallClient,
        provisioning: Optional[Provisioner] = None,
        observer: Optional[TransitionObserver] = None,
    ):
        self._config = config
        self._capabilities = capabilities
        self._call = call
        self._provisioning = provisioning
        self._observer = observer or TransitionObserver()
        self._resolver = RoomResolver(config, capabilities)

        self._state = self._start_state()
        self._room = RoomDescriptor(url=capabilities.manual_room_url_from_query)
        self._session_config = SessionConfig()
        self._room_error = False
        self._capacity_error: Optional[str] = None
        self._error: Optional[str] = None
        self._error_kind: Optional[ErrorKind] = None
        self._in_flight = False
        self._background: Set[asyncio.Task] = set()
        self._start_task: Optional[asyncio.Task] = None

    def _start_state(self) -> SessionState:
        if self._capabilities.show_config_options:
            return SessionState.IDLE
        return SessionState.CONFIGURING

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def room(self) -> RoomDescriptor:
        return self._room

    @property
    def observer(self) -> TransitionObserver:
        return self._observer

    @property
    def busy(self) -> bool:
        return self._in_flight or self._state in BUSY_STATES

    def _transition(self, new: SessionState, reason: str) -> None:
        old = self._state
        self._state = new
        self._observer.on_transition(old, new, reason)

    def _require(self, *states: SessionState) -> None:
        if self._in_flight:
            raise TransitionError(f"a transition from {self._state.value} is already in flight")
        if self._state not in states:
            raise TransitionError(f"not accepted in state {self._state.value}")

    def confirm_room(self, room_url: Optional[str] = None) -> bool:
        """User confirms the room choice on the landing step.

        Returns True when the step was left for configuring. A failed guard
        sets the validation-error flag and leaves the state untouched.
        """
        self._require(SessionState.IDLE)
        if room_url is not None:
            self._room = RoomDescriptor(url=room_url)

        if not self._resolver.accepts(self._room.url):
            logger.info("room url rejected: %r", self._room.url)
            self._room_error = True
            self._error_kind = ErrorKind.VALIDATION
            return False

        self._room_error = False
        self._error_kind = None
        self._transition(SessionState.CONFIGURING, "room confirmed")
        return True

    def configure(self, session_config: SessionConfig) -> None:
        self._require(SessionState.CONFIGURING)
        self._session_config = session_config

    def request_start(self) -> "asyncio.Task[None]":
        """Apply the first start transition now and run the rest in a task.

        The state leaves configuring before this returns, so a second request
        is refused instead of starting a parallel attempt.
        """
        self._require(SessionState.CONFIGURING)
        if self._provisioning is None and not self._room.url:
            raise TransitionError("no provisioning backend and no room url to join")

        self._in_flight = True
        self._capacity_error = None
        self._error_kind = None
        if self._provisioning is not None:
            self._transition(SessionState.REQUESTING_AGENT, "start requested")
        else:
            self._transition(SessionState.CONNECTING, "start requested")
        self._start_task = asyncio.create_task(self._run_start())
        return self._start_task

    async def start(self) -> None:
        await self.request_start()

    async def leave(self) -> None:
        self._require(SessionState.CONNECTED)
        self._in_flight = True
        try:
            await self._release_call()
        finally:
            self._in_flight = False
        self._error = None
        self._error_kind = None
        self._transition(self._start_state(), "left session")

    async def shutdown(self) -> None:
        """Release the call client once any start attempt has settled.

        A join that fails still leaves a client behind, so the error state is
        released as well as connected.
        """
        for task in list(self._background):
            task.cancel()
        if self._start_task is not None and not self._start_task.done():
            await asyncio.wait({self._start_task})
        if self._state in (SessionState.CONNECTED, SessionState.ERROR):
            await self._release_call()

    async def _run_start(self) -> None:
        try:
            if self._state is SessionState.REQUESTING_AGENT:
                if not await self._provision():
                    return
            await self._join()
        finally:
            self._in_flight = False

    async def _provision(self) -> bool:
        try:
            outcome = await self._provisioning.create_room()
        except Exception:
            # Provisioner implementations should return an outcome; treat a raise the same way.
            logger.exception("create_room raised")
            outcome = None

        if not isinstance(outcome, Success):
            self._capacity_error = CAPACITY_MESSAGE
            if isinstance(outcome, CapacityExceeded):
                self._error_kind = ErrorKind.CAPACITY
            else:
                self._error_kind = ErrorKind.TRANSPORT
            self._transition(SessionState.CONFIGURING, self._error_kind.value)
            return False

        self._room = RoomDescriptor(url=outcome.url, token=outcome.token)
        self._spawn_start_bot(outcome.url, outcome.token)
        self._transition(SessionState.CONNECTING, "room provisioned")
        return True

    async def _join(self) -> None:
        url = self._room.url
        try:
            await self._call.join(
                url=url,
                token=self._room.token or "",
                video_source=False,
                start_audio_off=self._session_config.start_audio_off,
            )
        except Exception:
            logger.exception("join failed for %s", url)
            self._error = f"Unable to join room: '{url}'"
            self._error_kind = ErrorKind.JOIN
            self._transition(SessionState.ERROR, "join failed")
            return
        self._transition(SessionState.CONNECTED, "joined")

    async def _release_call(self) -> None:
        # Both are attempted exactly once, even if nothing was joined.
        try:
            await self._call.leave()
        except Exception:
            logger.exception("leave failed")
        try:
            await self._call.destroy()
        except Exception:
            logger.exception("destroy failed")

    def _spawn_start_bot(self, url: str, token: str) -> None:
        task = asyncio.create_task(self._provisioning.start_bot(url, token))
        self._background.add(task)
        task.add_done_callback(self._on_start_bot_done)

    def _on_start_bot_done(self, task: asyncio.Task) -> None:
        self._background.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("start_bot failed: %s", exc, exc_info=exc)

    def view(self) -> SessionView:
        capacity_error = self._capacity_error
        return SessionView(
            state=self._state,
            title=self._config.app_title,
            status_text=STATUS_TEXT.get(self._state),
            busy=self.busy,
            proceed_enabled=(
                self._state is SessionState.IDLE and self._resolver.can_proceed(self._room.url)
            ),
            start_enabled=self._state is SessionState.CONFIGURING and not self._in_flight,
            room_error=self._room_error,
            room_url_from_query=self._resolver.query_room_url,
            room_url_from_query_valid=self._resolver.query_room_url_valid,
            server_url=self._config.server_url,
            capacity_error=capacity_error,
            help_url=self._config.capacity_help_url if capacity_error else None,
            error=self._error,
            error_kind=self._error_kind,
            open_mic=self._config.open_mic,
            start_audio_off=self._session_config.start_audio_off,
        )
