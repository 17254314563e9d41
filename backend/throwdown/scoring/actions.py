from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Union

from throwdown.scoring.state import DonkeyDerbyOptions, GameOptions, GameType, KillerOptions


@dataclass(frozen=True)
class AddPlayer:
    type: ClassVar[str] = "ADD_PLAYER"
    id: str
    name: str
    colour: str | None = None
    # Seeds the segment a player joining a Killer or Donkey Derby game draws.
    seed: int | None = None


@dataclass(frozen=True)
class RemovePlayer:
    type: ClassVar[str] = "REMOVE_PLAYER"
    id: str


@dataclass(frozen=True)
class SetPlayerOrder:
    type: ClassVar[str] = "SET_PLAYER_ORDER"
    player_ids: tuple[str, ...]


@dataclass(frozen=True)
class StartGame:
    type: ClassVar[str] = "START_GAME"
    game_type: GameType
    game_options: GameOptions | None = None
    killer_options: KillerOptions | None = None
    donkey_derby_options: DonkeyDerbyOptions | None = None
    # Seeds segment assignment; None draws from system randomness.
    seed: int | None = None


@dataclass(frozen=True)
class AssignSegments:
    type: ClassVar[str] = "ASSIGN_SEGMENTS"
    seed: int | None = None


@dataclass(frozen=True)
class AddDart:
    type: ClassVar[str] = "ADD_DART"
    dart: str


@dataclass(frozen=True)
class RemoveDart:
    type: ClassVar[str] = "REMOVE_DART"


@dataclass(frozen=True)
class SubmitThrow:
    type: ClassVar[str] = "SUBMIT_THROW"


@dataclass(frozen=True)
class InputScore:
    """Legacy: commit a typed visit total instead of individual darts."""

    type: ClassVar[str] = "INPUT_SCORE"
    score: int
    player_id: str | None = None


@dataclass(frozen=True)
class ProcessKillerDartHit:
    type: ClassVar[str] = "PROCESS_KILLER_DART_HIT"
    dart: str | None = None


@dataclass(frozen=True)
class RemoveKillerDart:
    type: ClassVar[str] = "REMOVE_KILLER_DART"


@dataclass(frozen=True)
class KillerSubmitThrow:
    type: ClassVar[str] = "KILLER_SUBMIT_THROW"


@dataclass(frozen=True)
class EndTurn:
    type: ClassVar[str] = "END_TURN"


@dataclass(frozen=True)
class EndGame:
    type: ClassVar[str] = "END_GAME"
    winner_id: str


@dataclass(frozen=True)
class UndoScore:
    type: ClassVar[str] = "UNDO_SCORE"
    player_id: str | None = None


@dataclass(frozen=True)
class ResetGame:
    type: ClassVar[str] = "RESET_GAME"


Action = Union[
    AddPlayer,
    RemovePlayer,
    SetPlayerOrder,
    StartGame,
    AssignSegments,
    AddDart,
    RemoveDart,
    SubmitThrow,
    InputScore,
    ProcessKillerDartHit,
    RemoveKillerDart,
    KillerSubmitThrow,
    EndTurn,
    EndGame,
    UndoScore,
    ResetGame,
]
