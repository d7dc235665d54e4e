import re
from typing import Optional

from .config import Capabilities, ClientConfig


def room_url_pattern(host: str) -> "re.Pattern[str]":
    # One subdomain label, exactly one path segment, no whitespace anywhere.
    return re.compile(rf"^https?://[^./\s]+\.{re.escape(host)}/[^/\s]+$")


class RoomResolver:
    """Decides whether a room is created automatically or typed in by the user."""

    def __init__(self, config: ClientConfig, capabilities: Capabilities) -> None:
        self._config = config
        self._capabilities = capabilities
        self._pattern = room_url_pattern(config.room_host)

    def validate(self, candidate: Optional[str]) -> bool:
        # The literal string is forwarded to join later, so nothing is normalised.
        return candidate is not None and self._pattern.fullmatch(candidate) is not None

    @property
    def query_room_url(self) -> Optional[str]:
        return self._capabilities.manual_room_url_from_query

    @property
    def query_room_url_valid(self) -> bool:
        return self.validate(self.query_room_url)

    def can_proceed(self, candidate: Optional[str]) -> bool:
        """Whether the landing step's proceed control should be enabled."""
        if self._capabilities.auto_room_creation:
            return True
        if (
            self.query_room_url is not None
            and not self._config.provisioning_configured
            and not self.query_room_url_valid
        ):
            return False
        return self.validate(candidate)

    def accepts(self, candidate: Optional[str]) -> bool:
        """Guard for leaving the landing step."""
        return self._capabilities.auto_room_creation or self.validate(candidate)
