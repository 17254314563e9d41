from __future__ import annotations

import logging
import random
from dataclasses import replace

from throwdown.scoring import throw_buffer
from throwdown.scoring.actions import Action, AddDart, EndTurn, RemoveDart, SubmitThrow
from throwdown.scoring.notation import parse_notation
from throwdown.scoring.segments import assign_segments, count_hit, owner_index
from throwdown.scoring.state import GameState, complete_game

logger = logging.getLogger(__name__)


def start(state: GameState, rng: random.Random) -> GameState:
    return replace(state, players=assign_segments(state.players, rng))


def resolve_visit(state: GameState) -> GameState:
    """
    Replay the buffered darts over the players as they were when the visit
    began. Own segment moves the donkey forward, anyone else's segment
    knocks that donkey back. Crossing the finish line wins on the spot.
    """
    if not state.is_active or state.current_player is None:
        return state

    base = state.visit_start_players if state.visit_start_players is not None else state.players
    players = list(base)
    actor_idx = state.current_player_index
    finish_line = state.donkey_derby_options.finish_line

    darts = state.current_throw.darts
    for n, notation in enumerate(darts, start=1):
        dart = parse_notation(notation)
        players[actor_idx] = count_hit(players[actor_idx], dart)
        target_idx = owner_index(players, dart.segment)
        if target_idx < 0:
            continue

        target = players[target_idx]
        if target_idx == actor_idx:
            progress = min(finish_line, target.donkey_progress + dart.multiplier)
            players[actor_idx] = replace(target, donkey_progress=progress)
            if progress >= finish_line:
                actor = players[actor_idx]
                players[actor_idx] = replace(actor, throws=(*actor.throws, darts[:n]))
                logger.info("donkey derby won by %s", actor.id)
                return complete_game(replace(state, players=tuple(players)), actor.id)
        else:
            progress = max(0, target.donkey_progress - dart.multiplier)
            players[target_idx] = replace(target, donkey_progress=progress)

    return replace(state, players=tuple(players), visit_start_players=tuple(base))


def end_turn(state: GameState) -> GameState:
    state = resolve_visit(state)
    player = state.current_player
    if not state.is_active or player is None:
        return state

    players = list(state.players)
    players[state.current_player_index] = replace(
        player, throws=(*player.throws, state.current_throw.darts)
    )
    nxt = (state.current_player_index + 1) % len(players)
    return throw_buffer.clear(
        replace(
            state,
            players=tuple(players),
            current_player_index=nxt,
            current_turn=state.current_turn + 1 if nxt == 0 else state.current_turn,
            visit_start_players=None,
        )
    )


def settle(state: GameState) -> GameState:
    """Replay any visit in progress after the roster changed."""
    if state.visit_start_players is None:
        return state
    return resolve_visit(state)


def reduce(state: GameState, action: Action) -> GameState:
    if isinstance(action, AddDart):
        if not state.is_active or len(state.current_throw.darts) >= throw_buffer.MAX_DARTS:
            return state
        return resolve_visit(throw_buffer.add_dart(state, action.dart))
    if isinstance(action, RemoveDart):
        if not state.is_active or not state.current_throw.darts:
            return state
        return resolve_visit(throw_buffer.remove_last_dart(state))
    if isinstance(action, (SubmitThrow, EndTurn)):
        return end_turn(state)
    return state
