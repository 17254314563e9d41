from __future__ import annotations

import logging
from threading import RLock

from throwdown.config import get_settings
from throwdown.scoring.actions import Action
from throwdown.scoring.engine import dispatch
from throwdown.scoring.persistence import JsonFileStateSink, NullStateSink, StateSink
from throwdown.scoring.state import GameState

logger = logging.getLogger(__name__)


class GameStore:
    """
    Holds the one live game. Every action goes through `dispatch`; the
    result is handed to the sink afterwards, and a failing sink never
    changes what is held in memory.
    """

    def __init__(self, sink: StateSink | None = None) -> None:
        self._lock = RLock()
        self._sink: StateSink = sink if sink is not None else NullStateSink()
        self._state = self._sink.load() or GameState()

    def state(self) -> GameState:
        with self._lock:
            return self._state

    def dispatch(self, action: Action) -> GameState:
        with self._lock:
            self._state = dispatch(self._state, action)
            state = self._state
        self._persist(state)
        return state

    def clear(self) -> GameState:
        with self._lock:
            self._state = GameState()
            state = self._state
        self._persist(state)
        return state

    def _persist(self, state: GameState) -> None:
        try:
            self._sink.save(state)
        except Exception:
            logger.exception("failed to persist game state")


_STORE: GameStore | None = None


def get_store() -> GameStore:
    global _STORE
    if _STORE is None:
        settings = get_settings()
        sink: StateSink = (
            JsonFileStateSink(settings.state_path) if settings.state_path else NullStateSink()
        )
        _STORE = GameStore(sink)
    return _STORE
