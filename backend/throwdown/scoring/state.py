from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum

from throwdown.scoring.stats import PlayerStats


class GameVariant(str, Enum):
    X01 = "x01"
    KILLER = "killer"
    SHANGHAI = "shanghai"
    DONKEY_DERBY = "donkey_derby"


class GameType(str, Enum):
    G301 = "301"
    G501 = "501"
    G701 = "701"
    CUSTOM = "custom"
    KILLER = "killer"
    SHANGHAI = "shanghai"
    DONKEY_DERBY = "donkey_derby"

    @property
    def variant(self) -> GameVariant:
        if self in (GameType.G301, GameType.G501, GameType.G701, GameType.CUSTOM):
            return GameVariant.X01
        return GameVariant(self.value)


class GameStatus(str, Enum):
    SETUP = "setup"
    ACTIVE = "active"
    COMPLETE = "complete"


class EntryMode(str, Enum):
    STRAIGHT = "straight"
    DOUBLE = "double"
    MASTER = "master"


# Out modes share the entry-mode vocabulary.
OutMode = EntryMode


class FormatType(str, Enum):
    BEST_OF = "bestOf"
    FIRST_TO = "firstTo"


@dataclass(frozen=True)
class GameOptions:
    starting_score: int = 501
    entry_mode: EntryMode = EntryMode.STRAIGHT
    out_mode: OutMode = EntryMode.DOUBLE
    format: FormatType = FormatType.BEST_OF
    legs: int = 1
    sets: int = 1

    def __post_init__(self) -> None:
        if self.starting_score <= 0:
            raise ValueError("starting_score must be > 0")
        if self.legs <= 0:
            raise ValueError("legs must be > 0")
        if self.sets <= 0:
            raise ValueError("sets must be > 0")

    def _required(self, count: int) -> int:
        if self.format == FormatType.BEST_OF:
            return -(-count // 2)
        return count

    @property
    def legs_to_win_set(self) -> int:
        return self._required(self.legs)

    @property
    def sets_to_win_match(self) -> int:
        return self._required(self.sets)


@dataclass(frozen=True)
class KillerOptions:
    max_hits: int = 3

    def __post_init__(self) -> None:
        if self.max_hits <= 0:
            raise ValueError("max_hits must be > 0")


@dataclass(frozen=True)
class DonkeyDerbyOptions:
    finish_line: int = 10

    def __post_init__(self) -> None:
        if self.finish_line <= 0:
            raise ValueError("finish_line must be > 0")


@dataclass(frozen=True)
class Player:
    id: str
    name: str
    colour: str = "#E94560"
    score: int = 0
    # Visits in the current leg, each a tuple of dart notations.
    throws: tuple[tuple[str, ...], ...] = ()
    wins: int = 0
    legs: int = 0
    sets: int = 0
    stats: PlayerStats = field(default_factory=PlayerStats)

    # Killer / Donkey Derby
    segment: int | None = None
    is_killer: bool = False
    segment_hits: int = 0
    is_eliminated: bool = False
    players_eliminated: int = 0

    # Hit counters (Killer, Shanghai, Donkey Derby)
    singles_hit: int = 0
    doubles_hit: int = 0
    triples_hit: int = 0

    # Shanghai
    shanghais_hit: int = 0
    shanghai_segment_scores: dict[int, int] = field(default_factory=dict)

    # Donkey Derby
    donkey_progress: int = 0

    @property
    def is_active(self) -> bool:
        return not self.is_eliminated


@dataclass(frozen=True)
class CurrentThrow:
    darts: tuple[str, ...] = ()
    is_complete: bool = False


@dataclass(frozen=True)
class VisitResult:
    """
    Result of a committed X01 visit (up to 3 darts).
    """

    player_id: str
    darts: tuple[str, ...]
    total: int
    bust: bool
    checkout: bool
    remaining_before: int
    remaining_after: int
    leg_number: int
    turn: int
    voided: bool = False


@dataclass(frozen=True)
class SessionStats:
    player_wins: dict[str, int] = field(default_factory=dict)
    games_played: int = 0

    def record_win(self, player_id: str) -> SessionStats:
        wins = dict(self.player_wins)
        wins[player_id] = wins.get(player_id, 0) + 1
        return SessionStats(player_wins=wins, games_played=self.games_played + 1)


@dataclass(frozen=True)
class GameState:
    players: tuple[Player, ...] = ()
    current_player_index: int = 0
    game_type: GameType = GameType.G501
    game_options: GameOptions = field(default_factory=GameOptions)
    killer_options: KillerOptions = field(default_factory=KillerOptions)
    donkey_derby_options: DonkeyDerbyOptions = field(default_factory=DonkeyDerbyOptions)
    game_status: GameStatus = GameStatus.SETUP
    current_turn: int = 1
    winner_id: str | None = None
    leg_starter_index: int = 0
    set_number: int = 1
    leg_number: int = 1
    current_throw: CurrentThrow = field(default_factory=CurrentThrow)
    # Active Shanghai segment, shared by the whole table.
    shanghai_segment: int = 1
    # Players as they were when the current visit began (Killer, Donkey Derby).
    visit_start_players: tuple[Player, ...] | None = None
    history: tuple[VisitResult, ...] = ()
    session_stats: SessionStats = field(default_factory=SessionStats)

    @property
    def is_active(self) -> bool:
        return self.game_status == GameStatus.ACTIVE

    @property
    def variant(self) -> GameVariant:
        return self.game_type.variant

    @property
    def current_player(self) -> Player | None:
        if 0 <= self.current_player_index < len(self.players):
            return self.players[self.current_player_index]
        return None

    @property
    def winner(self) -> Player | None:
        if self.winner_id is None:
            return None
        return find_player(self.players, self.winner_id)


def find_player(players: tuple[Player, ...], player_id: str) -> Player | None:
    for p in players:
        if p.id == player_id:
            return p
    return None


def index_of(players: tuple[Player, ...], player_id: str) -> int:
    for i, p in enumerate(players):
        if p.id == player_id:
            return i
    return -1


def replace_player(players: tuple[Player, ...], updated: Player) -> tuple[Player, ...]:
    return tuple(updated if p.id == updated.id else p for p in players)


def complete_game(state: GameState, winner_id: str) -> GameState:
    """
    Terminal transition: credit the winner, tally the session and close the game.
    """
    players = tuple(replace(p, wins=p.wins + 1) if p.id == winner_id else p for p in state.players)
    return replace(
        state,
        players=players,
        winner_id=winner_id,
        game_status=GameStatus.COMPLETE,
        session_stats=state.session_stats.record_win(winner_id),
        current_throw=CurrentThrow(),
        visit_start_players=None,
    )
