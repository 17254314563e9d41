from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Protocol

from pydantic import TypeAdapter, ValidationError

from throwdown.scoring.state import GameState, SessionStats

logger = logging.getLogger(__name__)

# Sub-option structs an older snapshot may omit or store as null.
_OPTIONAL_STRUCTS = ("game_options", "killer_options", "donkey_derby_options")


@dataclass(frozen=True)
class Snapshot:
    session_stats: SessionStats = field(default_factory=SessionStats)
    game: GameState | None = None


_SNAPSHOT = TypeAdapter(Snapshot)


class StateSink(Protocol):
    def save(self, state: GameState) -> None: ...

    def load(self) -> GameState | None: ...


def to_snapshot(state: GameState) -> Snapshot:
    """
    Only a game in progress is worth resuming; otherwise keep the session
    tallies and nothing else.
    """
    if state.is_active:
        return Snapshot(session_stats=state.session_stats, game=state)
    return Snapshot(session_stats=state.session_stats)


def from_snapshot(snapshot: Snapshot) -> GameState:
    if snapshot.game is None:
        return GameState(session_stats=snapshot.session_stats)
    return replace(snapshot.game, session_stats=snapshot.session_stats)


def _drop_null_structs(raw: Any) -> Any:
    game = raw.get("game") if isinstance(raw, dict) else None
    if isinstance(game, dict):
        for key in _OPTIONAL_STRUCTS:
            if game.get(key) is None:
                game.pop(key, None)
    return raw


def dumps(state: GameState) -> bytes:
    return _SNAPSHOT.dump_json(to_snapshot(state), indent=2)


def loads(data: str | bytes) -> GameState:
    raw = _drop_null_structs(json.loads(data))
    return from_snapshot(_SNAPSHOT.validate_python(raw))


class JsonFileStateSink:
    """
    Keeps the latest snapshot in a single JSON file.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def save(self, state: GameState) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_bytes(dumps(state))
        tmp.replace(self._path)

    def load(self) -> GameState | None:
        if not self._path.exists():
            return None
        try:
            return loads(self._path.read_bytes())
        except (OSError, ValueError, ValidationError):
            logger.exception("could not load saved game from %s", self._path)
            return None


class MemoryStateSink:
    def __init__(self) -> None:
        self.saved: bytes | None = None
        self.saves = 0

    def save(self, state: GameState) -> None:
        self.saved = dumps(state)
        self.saves += 1

    def load(self) -> GameState | None:
        if self.saved is None:
            return None
        return loads(self.saved)


class NullStateSink:
    def save(self, state: GameState) -> None:
        return None

    def load(self) -> GameState | None:
        return None
