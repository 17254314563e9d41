from __future__ import annotations

import logging
import random
from dataclasses import replace

from throwdown.scoring import throw_buffer
from throwdown.scoring.actions import Action, AddDart, EndTurn, RemoveDart, SubmitThrow
from throwdown.scoring.notation import parse_notation
from throwdown.scoring.segments import count_hit
from throwdown.scoring.state import GameState, Player, complete_game

logger = logging.getLogger(__name__)

FINAL_SEGMENT = 9


def start(state: GameState, rng: random.Random) -> GameState:
    return replace(state, shanghai_segment=1)


def _rank_key(indexed: tuple[int, Player]) -> tuple[int, int, int]:
    # Highest total, then most segments scored on, then earliest in the throwing order.
    i, p = indexed
    segments_scored = sum(1 for v in p.shanghai_segment_scores.values() if v > 0)
    return (p.score, segments_scored, -i)


def pick_winner(players: tuple[Player, ...]) -> Player:
    return max(enumerate(players), key=_rank_key)[1]


def _score_visit(player: Player, darts: tuple[str, ...], segment: int) -> Player:
    scores = dict(player.shanghai_segment_scores)
    multipliers_on_segment: set[int] = set()

    for notation in darts:
        dart = parse_notation(notation)
        player = count_hit(player, dart)
        if dart.segment == segment:
            scores[segment] = scores.get(segment, 0) + dart.score
            multipliers_on_segment.add(dart.multiplier)

    shanghai = multipliers_on_segment >= {1, 2, 3}
    return replace(
        player,
        shanghai_segment_scores=scores,
        score=sum(scores.values()),
        shanghais_hit=player.shanghais_hit + (1 if shanghai else 0),
        throws=(*player.throws, darts),
    )


def submit_throw(state: GameState) -> GameState:
    """
    Commit the visit against the segment in play. When the last player of
    the round has thrown, the table moves on to the next segment; after
    segment 9 the highest total wins.
    """
    player = state.current_player
    if not state.is_active or player is None:
        return state

    segment = state.shanghai_segment
    players = list(state.players)
    players[state.current_player_index] = _score_visit(
        player, state.current_throw.darts, segment
    )
    players = tuple(players)
    state = replace(state, players=players)

    nxt = (state.current_player_index + 1) % len(players)
    if nxt != 0:
        return throw_buffer.clear(replace(state, current_player_index=nxt))

    if segment >= FINAL_SEGMENT:
        winner = pick_winner(players)
        logger.info("shanghai won by %s with %d", winner.id, winner.score)
        return complete_game(state, winner.id)

    logger.debug("shanghai moves to segment %d", segment + 1)
    return throw_buffer.clear(
        replace(
            state,
            current_player_index=0,
            current_turn=state.current_turn + 1,
            shanghai_segment=segment + 1,
        )
    )


def reduce(state: GameState, action: Action) -> GameState:
    if isinstance(action, AddDart):
        return throw_buffer.add_dart(state, action.dart)
    if isinstance(action, RemoveDart):
        return throw_buffer.remove_last_dart(state)
    if isinstance(action, (SubmitThrow, EndTurn)):
        return submit_throw(state)
    return state
