import asyncio

import pytest

from voice_client.config import Capabilities, ClientConfig
from voice_client.models import Success
from voice_client.orchestrator import SessionOrchestrator

ROOM_HOST = "example-provider.com"
ROOM_URL = "https://foo.example-provider.com/room1"


@pytest.fixture
def anyio_backend():
    return "asyncio"


class FakeCall:
    def __init__(self, fail_join: bool = False, fail_leave: bool = False):
        self.fail_join = fail_join
        self.fail_leave = fail_leave
        self.joins = []
        self.leave_calls = 0
        self.destroy_calls = 0

    async def join(self, *, url, token, video_source, start_audio_off):
        self.joins.append(
            {
                "url": url,
                "token": token,
                "video_source": video_source,
                "start_audio_off": start_audio_off,
            }
        )
        if self.fail_join:
            raise RuntimeError("join refused")

    async def leave(self):
        self.leave_calls += 1
        if self.fail_leave:
            raise RuntimeError("not in a call")

    async def destroy(self):
        self.destroy_calls += 1


class FakeProvisioner:
    def __init__(self, outcome=None, start_bot_error=None, block_start_bot=False):
        self.outcome = outcome or Success(url="https://bot.example-provider.com/abc", token="tok-1")
        self.start_bot_error = start_bot_error
        self.create_calls = 0
        self.start_bot_calls = []
        self.release_start_bot = asyncio.Event() if block_start_bot else None

    async def create_room(self):
        self.create_calls += 1
        return self.outcome

    async def start_bot(self, room_url, token):
        self.start_bot_calls.append((room_url, token))
        if self.release_start_bot is not None:
            await self.release_start_bot.wait()
        if self.start_bot_error is not None:
            raise self.start_bot_error


def make_config(**overrides) -> ClientConfig:
    values = {
        "server_url": "https://agents.test/",
        "server_auth": "secret",
        "room_host": ROOM_HOST,
        "app_title": "Demo",
    }
    values.update(overrides)
    return ClientConfig(**values)


@pytest.fixture
def make_orchestrator():
    def _make(*, room_url=None, call=None, provisioning="default", **config_overrides):
        config = make_config(**config_overrides)
        if provisioning == "default":
            provisioning = FakeProvisioner() if config.provisioning_configured else None
        return SessionOrchestrator(
            config=config,
            capabilities=Capabilities.resolve(config, room_url),
            call=call or FakeCall(),
            provisioning=provisioning,
        )

    return _make
