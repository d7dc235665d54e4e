import logging
from dataclasses import dataclass
from typing import List

from .state import SessionState

logger = logging.getLogger("voice-client")


@dataclass
class Transition:
    old: SessionState
    new: SessionState
    reason: str


class TransitionObserver:
    """Logs every state change and keeps a short history for diagnostics."""

    def __init__(self, max_history: int = 50):
        self._history: List[Transition] = []
        self._max_history = max_history

    def on_transition(self, old: SessionState, new: SessionState, reason: str) -> None:
        logger.info("state=%s -> %s (%s)", old.value, new.value, reason)
        self._history.append(Transition(old=old, new=new, reason=reason))
        if len(self._history) > self._max_history:
            del self._history[0]

    @property
    def history(self) -> List[Transition]:
        return list(self._history)


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
