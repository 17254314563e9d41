from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from typing import Callable

from throwdown.scoring import donkey_derby, killer, shanghai, throw_buffer, x01
from throwdown.scoring.actions import (
    Action,
    AddPlayer,
    AssignSegments,
    EndGame,
    RemovePlayer,
    ResetGame,
    SetPlayerOrder,
    StartGame,
    SubmitThrow,
)
from throwdown.scoring.segments import assign_segments, draw_free_segment
from throwdown.scoring.state import (
    DonkeyDerbyOptions,
    GameOptions,
    GameState,
    GameStatus,
    GameType,
    GameVariant,
    KillerOptions,
    Player,
    complete_game,
    find_player,
    index_of,
)

logger = logging.getLogger(__name__)

PLAYER_COLOURS: tuple[str, ...] = (
    "#E94560",
    "#FF6B6B",
    "#FFA500",
    "#FFD700",
    "#90EE90",
    "#4CAF50",
    "#00CED1",
    "#1E90FF",
    "#6A5ACD",
    "#9370DB",
    "#FF69B4",
    "#FF1493",
    "#C0C0C0",
    "#FFFFFF",
)


def _identity(state: GameState) -> GameState:
    return state


@dataclass(frozen=True)
class VariantRules:
    start: Callable[[GameState, random.Random], GameState]
    reduce: Callable[[GameState, Action], GameState]
    # Re-derives the table after a roster change during a game.
    settle: Callable[[GameState], GameState] = _identity
    min_players: int = 1
    uses_segments: bool = False


RULES: dict[GameVariant, VariantRules] = {
    GameVariant.X01: VariantRules(start=x01.start, reduce=x01.reduce),
    GameVariant.KILLER: VariantRules(
        start=killer.start,
        reduce=killer.reduce,
        settle=killer.settle,
        min_players=2,
        uses_segments=True,
    ),
    GameVariant.SHANGHAI: VariantRules(start=shanghai.start, reduce=shanghai.reduce),
    GameVariant.DONKEY_DERBY: VariantRules(
        start=donkey_derby.start,
        reduce=donkey_derby.reduce,
        settle=donkey_derby.settle,
        uses_segments=True,
    ),
}


def pick_colour(players: tuple[Player, ...]) -> str:
    used = {p.colour for p in players}
    for colour in PLAYER_COLOURS:
        if colour not in used:
            return colour
    return PLAYER_COLOURS[len(players) % len(PLAYER_COLOURS)]


def _fresh_player(player: Player, score: int) -> Player:
    """Clear everything a game leaves on a player; keep identity and wins."""
    return Player(
        id=player.id,
        name=player.name,
        colour=player.colour,
        score=score,
        wins=player.wins,
    )


def _default_options(game_type: GameType) -> GameOptions:
    if game_type.value.isdigit():
        return GameOptions(starting_score=int(game_type.value))
    return GameOptions()


def _edit_roster(
    state: GameState, edit: Callable[[tuple[Player, ...]], tuple[Player, ...]]
) -> GameState:
    """Apply one roster edit to the players and to the visit snapshot alike."""
    snapshot = state.visit_start_players
    return replace(
        state,
        players=edit(state.players),
        visit_start_players=edit(snapshot) if snapshot is not None else None,
    )


def _settle(state: GameState) -> GameState:
    if not state.is_active:
        return state
    return RULES[state.variant].settle(state)


def add_player(state: GameState, action: AddPlayer) -> GameState:
    """
    Join the roster. During a game the newcomer starts from scratch for the
    variant in play, with a segment of their own where one is needed.
    """
    if find_player(state.players, action.id) is not None:
        return state

    score = state.game_options.starting_score
    segment = None
    if state.is_active:
        if state.variant != GameVariant.X01:
            score = 0
        if RULES[state.variant].uses_segments:
            segment = draw_free_segment(state.players, random.Random(action.seed))
    player = Player(
        id=action.id,
        name=action.name,
        colour=action.colour or pick_colour(state.players),
        score=score,
        wins=state.session_stats.player_wins.get(action.id, 0),
        segment=segment,
    )
    state = _edit_roster(state, lambda players: (*players, player))
    return _settle(state)


def _shift_index(index: int, removed: int, remaining: int) -> int:
    if removed < index:
        index -= 1
    if index >= remaining:
        index = 0
    return index


def remove_player(state: GameState, action: RemovePlayer) -> GameState:
    idx = index_of(state.players, action.id)
    if idx < 0:
        return state

    if idx == state.current_player_index:
        # The thrower's visit goes with them.
        if state.visit_start_players is not None:
            state = replace(state, players=state.visit_start_players)
        state = throw_buffer.clear(replace(state, visit_start_players=None))

    state = _edit_roster(
        state, lambda players: tuple(p for p in players if p.id != action.id)
    )
    remaining = len(state.players)
    state = replace(
        state,
        current_player_index=_shift_index(state.current_player_index, idx, remaining),
        leg_starter_index=_shift_index(state.leg_starter_index, idx, remaining),
    )
    return _settle(state)


def _index_in(players: tuple[Player, ...], player: Player | None) -> int:
    if player is None:
        return 0
    return max(index_of(players, player.id), 0)


def set_player_order(state: GameState, action: SetPlayerOrder) -> GameState:
    """
    Reorder the roster by id. Unknown ids are ignored; players left out
    keep their relative order after the listed ones. The thrower and the
    leg starter stay the same people.
    """
    order: list[str] = []
    for player_id in action.player_ids:
        if find_player(state.players, player_id) is not None and player_id not in order:
            order.append(player_id)
    order.extend(p.id for p in state.players if p.id not in order)

    def reorder(players: tuple[Player, ...]) -> tuple[Player, ...]:
        by_id = {p.id: p for p in players}
        return tuple(by_id[pid] for pid in order if pid in by_id)

    current = state.current_player
    starter = (
        state.players[state.leg_starter_index]
        if 0 <= state.leg_starter_index < len(state.players)
        else None
    )
    state = _edit_roster(state, reorder)
    return replace(
        state,
        current_player_index=_index_in(state.players, current),
        leg_starter_index=_index_in(state.players, starter),
    )


def start_game(state: GameState, action: StartGame) -> GameState:
    rules = RULES[action.game_type.variant]
    if len(state.players) < rules.min_players:
        return state

    options = action.game_options or _default_options(action.game_type)
    x01_game = action.game_type.variant == GameVariant.X01
    players = tuple(
        _fresh_player(p, options.starting_score if x01_game else 0) for p in state.players
    )
    started = GameState(
        players=players,
        game_type=action.game_type,
        game_options=options,
        killer_options=action.killer_options or KillerOptions(),
        donkey_derby_options=action.donkey_derby_options or DonkeyDerbyOptions(),
        game_status=GameStatus.ACTIVE,
        session_stats=state.session_stats,
    )
    logger.info("starting %s with %d players", action.game_type.value, len(players))
    return rules.start(started, random.Random(action.seed))


def reassign_segments(state: GameState, action: AssignSegments) -> GameState:
    """Draw segments again, allowed only before anyone has thrown."""
    if not state.is_active or not RULES[state.variant].uses_segments:
        return state
    if state.current_throw.darts or any(p.throws for p in state.players):
        return state
    return replace(
        state,
        players=assign_segments(state.players, random.Random(action.seed)),
        visit_start_players=None,
    )


def end_game(state: GameState, action: EndGame) -> GameState:
    if not state.is_active or find_player(state.players, action.winner_id) is None:
        return state
    logger.info("game ended, winner %s", action.winner_id)
    return complete_game(state, action.winner_id)


def reset_game(state: GameState) -> GameState:
    """Back to setup with the same roster; only session tallies survive."""
    defaults = GameOptions()
    players = tuple(_fresh_player(p, defaults.starting_score) for p in state.players)
    return GameState(players=players, session_stats=state.session_stats)


_SHARED: dict[type, Callable[[GameState, Action], GameState]] = {
    AddPlayer: add_player,
    RemovePlayer: remove_player,
    SetPlayerOrder: set_player_order,
    StartGame: start_game,
    AssignSegments: reassign_segments,
    EndGame: end_game,
    ResetGame: lambda state, action: reset_game(state),
}


def dispatch(state: GameState, action: Action) -> GameState:
    """
    Apply one action and return the next state. Never raises; an action
    that does not apply leaves the state as it was.
    """
    logger.debug("dispatch %s", getattr(action, "type", type(action).__name__))

    handler = _SHARED.get(type(action))
    if handler is not None:
        return handler(state, action)

    if not state.is_active:
        return state
    if isinstance(action, SubmitThrow) and not state.current_throw.darts:
        return state
    return RULES[state.variant].reduce(state, action)
