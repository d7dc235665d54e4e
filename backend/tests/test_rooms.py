import pytest

from voice_client.config import Capabilities
from voice_client.rooms import RoomResolver

from conftest import ROOM_URL, make_config


def _resolver(room_url=None, **overrides):
    config = make_config(**overrides)
    return RoomResolver(config, Capabilities.resolve(config, room_url))


@pytest.mark.parametrize(
    "candidate,expected",
    [
        ("https://foo.example-provider.com/room1", True),
        ("http://foo.example-provider.com/room1", True),
        ("https://foo.example-provider.com/Room-1_a", True),
        ("https://foo.example-provider.com/room1/", False),
        ("https://foo.example-provider.com/room1/extra", False),
        ("https://example-provider.com/room1", False),
        ("https://a.b.example-provider.com/room1", False),
        ("https://foo.example-provider.com/", False),
        ("https://foo.example-provider.com", False),
        ("https://foo.other-provider.com/room1", False),
        ("HTTPS://foo.example-provider.com/room1", False),
        (" https://foo.example-provider.com/room1", False),
        ("https://foo.example-provider.com/room1\n", False),
        ("https://foo.example-provider.com/room 1", False),
        ("https://fo o.example-provider.com/room1", False),
        ("", False),
        (None, False),
    ],
)
def test_validate(candidate, expected):
    assert _resolver().validate(candidate) is expected


def test_validate_uses_configured_host():
    resolver = _resolver(room_host="daily.co")
    assert resolver.validate("https://acme.daily.co/standup")
    assert not resolver.validate(ROOM_URL)


def test_host_dots_are_literal():
    assert not _resolver().validate("https://foo.example-providerXcom/room1")


def test_auto_room_creation_always_proceeds():
    resolver = _resolver()
    assert resolver.can_proceed(None)
    assert resolver.can_proceed("not a url")
    assert resolver.accepts("not a url")


def test_manual_entry_requires_valid_candidate():
    resolver = _resolver(manual_room_entry=True)
    assert not resolver.can_proceed(None)
    assert not resolver.can_proceed("https://foo.example-provider.com/room1/")
    assert resolver.can_proceed(ROOM_URL)
    assert not resolver.accepts(None)
    assert resolver.accepts(ROOM_URL)


def test_invalid_query_url_without_backend_disables_proceed():
    resolver = _resolver(room_url="https://bad/room", server_url=None)
    assert resolver.query_room_url == "https://bad/room"
    assert not resolver.query_room_url_valid
    assert not resolver.can_proceed(ROOM_URL)


def test_valid_query_url_without_backend_can_proceed():
    resolver = _resolver(room_url=ROOM_URL, server_url=None)
    assert resolver.query_room_url_valid
    assert resolver.can_proceed(ROOM_URL)
