import asyncio
import logging
from typing import Any, Optional, Protocol

logger = logging.getLogger("voice-client")


class JoinError(RuntimeError):
    pass


class CallClient(Protocol):
    """Real-time session capability. At most one session is active at a time."""

    async def join(
        self, *, url: str, token: str, video_source: bool, start_audio_off: bool
    ) -> None: ...

    async def leave(self) -> None: ...

    async def destroy(self) -> None: ...


class DailyCall:
    """CallClient backed by the Daily Python SDK.

    The SDK reports completion through callbacks invoked on its own thread;
    they are bridged back onto the event loop with call_soon_threadsafe.
    """

    _sdk_initialized = False

    def __init__(self) -> None:
        self._client: Any = None

    @classmethod
    def _init_sdk(cls) -> None:
        if not cls._sdk_initialized:
            from daily import Daily

            Daily.init()
            cls._sdk_initialized = True

    async def join(
        self, *, url: str, token: str, video_source: bool, start_audio_off: bool
    ) -> None:
        from daily import CallClient as DailyCallClient

        self._init_sdk()
        if self._client is None:
            self._client = DailyCallClient()

        loop = asyncio.get_running_loop()
        future = loop.create_future()

        def on_joined(data, error):
            loop.call_soon_threadsafe(future.set_result, error)

        self._client.join(
            url,
            token or None,
            client_settings={
                "inputs": {
                    "camera": {"isEnabled": video_source},
                    "microphone": {"isEnabled": not start_audio_off},
                }
            },
            completion=on_joined,
        )
        error = await future
        if error:
            raise JoinError(str(error))
        logger.info("joined %s", url)

    async def leave(self) -> None:
        if self._client is None:
            return

        loop = asyncio.get_running_loop()
        future = loop.create_future()

        def on_left(error=None):
            loop.call_soon_threadsafe(future.set_result, error)

        self._client.leave(completion=on_left)
        error = await future
        if error:
            logger.warning("leave reported: %s", error)

    async def destroy(self) -> None:
        client: Optional[Any] = self._client
        self._client = None
        if client is not None:
            client.release()
