import pytest
from pydantic import ValidationError

from voice_client.config import (
    DEFAULT_CAPACITY_HELP_URL,
    DEFAULT_ROOM_HOST,
    Capabilities,
    ClientConfig,
)


def test_from_env_defaults():
    config = ClientConfig.from_env({})
    assert config.server_url is None
    assert config.server_auth is None
    assert not config.manual_room_entry
    assert not config.show_config
    assert not config.open_mic
    assert config.app_title == ""
    assert config.room_host == DEFAULT_ROOM_HOST
    assert config.capacity_help_url == DEFAULT_CAPACITY_HELP_URL
    assert not config.provisioning_configured


def test_from_env_appends_trailing_slash():
    config = ClientConfig.from_env({"SERVER_URL": "https://agents.test/api"})
    assert config.server_url == "https://agents.test/api/"
    assert ClientConfig.from_env({"SERVER_URL": "https://agents.test/"}).server_url == (
        "https://agents.test/"
    )


def test_flags_are_set_by_any_non_empty_value():
    config = ClientConfig.from_env(
        {"MANUAL_ROOM_ENTRY": "0", "SHOW_CONFIG": "yes", "OPEN_MIC": "", "APP_TITLE": "Demo"}
    )
    assert config.manual_room_entry
    assert config.show_config
    assert not config.open_mic
    assert config.app_title == "Demo"


def test_config_is_immutable():
    config = ClientConfig.from_env({})
    with pytest.raises(ValidationError):
        config.server_url = "https://elsewhere.test/"


def test_auto_room_creation_needs_backend_and_no_manual_flag():
    assert Capabilities.resolve(ClientConfig(server_url="https://a.test/")).auto_room_creation
    assert not Capabilities.resolve(ClientConfig()).auto_room_creation
    assert not Capabilities.resolve(
        ClientConfig(server_url="https://a.test/", manual_room_entry=True)
    ).auto_room_creation


def test_capabilities_carry_query_room_url():
    caps = Capabilities.resolve(ClientConfig(show_config=True), "https://x.daily.co/r")
    assert caps.manual_room_url_from_query == "https://x.daily.co/r"
    assert caps.show_config_options
    assert Capabilities.resolve(ClientConfig(), "").manual_room_url_from_query is None
