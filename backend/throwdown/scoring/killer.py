from __future__ import annotations

import logging
import random
from dataclasses import replace

from throwdown.scoring import throw_buffer
from throwdown.scoring.actions import (
    Action,
    AddDart,
    EndTurn,
    KillerSubmitThrow,
    ProcessKillerDartHit,
    RemoveDart,
    RemoveKillerDart,
    SubmitThrow,
)
from throwdown.scoring.notation import Dart, parse_notation
from throwdown.scoring.segments import assign_segments, count_hit, owner_index
from throwdown.scoring.state import GameState, Player, complete_game

logger = logging.getLogger(__name__)

# Lives below zero: a player whose hits fall to this is out.
ELIMINATION_THRESHOLD = -1


def start(state: GameState, rng: random.Random) -> GameState:
    return replace(state, players=assign_segments(state.players, rng))


def _apply_hit(players: list[Player], actor_idx: int, dart: Dart, max_hits: int) -> None:
    actor = count_hit(players[actor_idx], dart)
    segment = dart.segment

    if segment is not None and segment == actor.segment:
        hits = min(max_hits, actor.segment_hits + dart.multiplier)
        if hits >= max_hits and not actor.is_killer:
            logger.debug("%s is now a killer", actor.id)
        actor = replace(actor, segment_hits=hits, is_killer=actor.is_killer or hits >= max_hits)
    elif actor.is_killer:
        target_idx = owner_index(players, segment)
        if target_idx >= 0 and target_idx != actor_idx and not players[target_idx].is_eliminated:
            target = players[target_idx]
            hits = max(ELIMINATION_THRESHOLD, target.segment_hits - dart.multiplier)
            eliminated = hits <= ELIMINATION_THRESHOLD
            players[target_idx] = replace(target, segment_hits=hits, is_eliminated=eliminated)
            if eliminated:
                logger.debug("%s eliminated by %s", target.id, actor.id)
                actor = replace(actor, players_eliminated=actor.players_eliminated + 1)

    players[actor_idx] = actor


def last_standing(players: list[Player] | tuple[Player, ...]) -> Player | None:
    """The sole surviving player, once at least one other has been eliminated."""
    alive = [p for p in players if not p.is_eliminated]
    if len(alive) == 1 and len(players) > 1:
        return alive[0]
    return None


def resolve_visit(state: GameState) -> GameState:
    """
    Recompute every player from the start of the visit by replaying the
    buffered darts. Adding and removing darts both land here, so undo is
    always exact.
    """
    if not state.is_active or state.current_player is None:
        return state

    base = state.visit_start_players if state.visit_start_players is not None else state.players
    players = list(base)
    actor_idx = state.current_player_index
    max_hits = state.killer_options.max_hits

    darts = state.current_throw.darts
    for n, notation in enumerate(darts, start=1):
        _apply_hit(players, actor_idx, parse_notation(notation), max_hits)
        winner = last_standing(players)
        if winner is not None:
            actor = players[actor_idx]
            players[actor_idx] = replace(actor, throws=(*actor.throws, darts[:n]))
            logger.info("killer won by %s", winner.id)
            return complete_game(replace(state, players=tuple(players)), winner.id)

    return replace(state, players=tuple(players), visit_start_players=tuple(base))


def _next_alive(players: tuple[Player, ...], current: int) -> tuple[int, bool]:
    n = len(players)
    for step in range(1, n + 1):
        i = (current + step) % n
        if not players[i].is_eliminated:
            return i, current + step >= n
    return current, False


def submit_throw(state: GameState) -> GameState:
    """
    End the visit: record it and pass to the next player still in the game.
    """
    state = resolve_visit(state)
    player = state.current_player
    if not state.is_active or player is None:
        return state

    darts = state.current_throw.darts
    players = list(state.players)
    players[state.current_player_index] = replace(player, throws=(*player.throws, darts))
    players = tuple(players)

    nxt, wrapped = _next_alive(players, state.current_player_index)
    return throw_buffer.clear(
        replace(
            state,
            players=players,
            current_player_index=nxt,
            current_turn=state.current_turn + 1 if wrapped else state.current_turn,
            visit_start_players=None,
        )
    )


def settle(state: GameState) -> GameState:
    """
    Bring the table back in line after the roster changed. A visit in
    progress is replayed over the edited snapshot, and a lone survivor wins.
    """
    if not state.is_active or not state.players:
        return state
    if state.visit_start_players is not None:
        state = resolve_visit(state)
        if not state.is_active:
            return state

    alive = [p for p in state.players if not p.is_eliminated]
    if len(alive) == 1:
        logger.info("killer won by %s", alive[0].id)
        return complete_game(state, alive[0].id)

    if state.players[state.current_player_index].is_eliminated:
        nxt, _ = _next_alive(state.players, state.current_player_index)
        state = throw_buffer.clear(
            replace(state, current_player_index=nxt, visit_start_players=None)
        )
    return state


def reduce(state: GameState, action: Action) -> GameState:
    if isinstance(action, AddDart):
        return throw_buffer.add_dart(state, action.dart)
    if isinstance(action, ProcessKillerDartHit):
        if action.dart is not None:
            state = throw_buffer.add_dart(state, action.dart)
        return resolve_visit(state)
    if isinstance(action, (RemoveKillerDart, RemoveDart)):
        if not state.is_active or not state.current_throw.darts:
            return state
        return resolve_visit(throw_buffer.remove_last_dart(state))
    if isinstance(action, (KillerSubmitThrow, SubmitThrow, EndTurn)):
        return submit_throw(state)
    return state
