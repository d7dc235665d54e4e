import os
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_ROOM_HOST = "daily.co"
DEFAULT_CAPACITY_HELP_URL = "https://docs.cerebrium.ai/v4/examples/realtime-voice-agents"


def _flag(environ: Mapping[str, str], key: str) -> bool:
    # Any non-empty value switches a flag on, including "0" and "false".
    return bool(environ.get(key))


class ClientConfig(BaseModel):
    """Process-wide configuration, resolved once from the environment at startup."""

    model_config = ConfigDict(frozen=True)

    server_url: Optional[str] = None
    server_auth: Optional[str] = None
    manual_room_entry: bool = False
    show_config: bool = False
    open_mic: bool = False
    app_title: str = ""
    room_host: str = DEFAULT_ROOM_HOST
    capacity_help_url: str = DEFAULT_CAPACITY_HELP_URL
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ClientConfig":
        env = os.environ if environ is None else environ
        server_url = env.get("SERVER_URL") or None
        if server_url and not server_url.endswith("/"):
            server_url += "/"
        return cls(
            server_url=server_url,
            server_auth=env.get("SERVER_AUTH") or None,
            manual_room_entry=_flag(env, "MANUAL_ROOM_ENTRY"),
            show_config=_flag(env, "SHOW_CONFIG"),
            open_mic=_flag(env, "OPEN_MIC"),
            app_title=env.get("APP_TITLE", ""),
            room_host=env.get("ROOM_HOST") or DEFAULT_ROOM_HOST,
            capacity_help_url=env.get("CAPACITY_HELP_URL") or DEFAULT_CAPACITY_HELP_URL,
            log_level=env.get("LOG_LEVEL", "INFO"),
        )

    @property
    def provisioning_configured(self) -> bool:
        return bool(self.server_url)


class Capabilities(BaseModel):
    model_config = ConfigDict(frozen=True)

    auto_room_creation: bool = Field(default=False)
    manual_room_url_from_query: Optional[str] = None
    show_config_options: bool = False

    @classmethod
    def resolve(cls, config: ClientConfig, room_url: Optional[str] = None) -> "Capabilities":
        return cls(
            auto_room_creation=config.provisioning_configured and not config.manual_room_entry,
            manual_room_url_from_query=room_url or None,
            show_config_options=config.show_config,
        )
