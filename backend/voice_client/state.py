from enum import Enum


class SessionState(str, Enum):
    """Lifecycle of a single provisioning-and-join attempt.

    Only states that a transition can produce are listed here.
    """

    IDLE = "idle"
    CONFIGURING = "configuring"
    REQUESTING_AGENT = "requesting_agent"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERROR = "error"


# Suspending operations are outstanding in these states; triggers are refused.
BUSY_STATES = frozenset({SessionState.REQUESTING_AGENT, SessionState.CONNECTING})

STATUS_TEXT = {
    SessionState.CONFIGURING: "Let's go!",
    SessionState.REQUESTING_AGENT: "Requesting agent...",
    SessionState.CONNECTING: "Connecting to room...",
}
