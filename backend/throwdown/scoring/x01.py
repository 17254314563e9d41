from __future__ import annotations

import logging
import random
from dataclasses import replace
from typing import Sequence

from throwdown.scoring import throw_buffer
from throwdown.scoring.actions import Action, AddDart, EndTurn, InputScore, RemoveDart, SubmitThrow, UndoScore
from throwdown.scoring.notation import Dart, calculate_score, is_score_valid, parse_notation
from throwdown.scoring.state import (
    EntryMode,
    GameState,
    Player,
    VisitResult,
    complete_game,
    index_of,
)
from throwdown.scoring.stats import compute_player_stats

logger = logging.getLogger(__name__)


def start(state: GameState, rng: random.Random) -> GameState:
    score = state.game_options.starting_score
    players = tuple(replace(p, score=score) for p in state.players)
    return replace(state, players=players)


def _qualifies(dart: Dart, mode: EntryMode) -> bool:
    if mode == EntryMode.DOUBLE:
        return dart.is_double
    if mode == EntryMode.MASTER:
        return dart.is_master
    return True


def _meets_entry(darts: Sequence[Dart], mode: EntryMode, total: int) -> bool:
    if mode == EntryMode.STRAIGHT or total == 0:
        return True
    return any(_qualifies(d, mode) for d in darts)


def _finishing_dart(darts: Sequence[Dart], remaining: int) -> Dart | None:
    """The dart that brings the running total to exactly `remaining`."""
    running = 0
    for d in darts:
        running += d.score
        if running == remaining:
            return d
    return None


def _straight_out(state: GameState) -> bool:
    return state.game_options.out_mode == EntryMode.STRAIGHT


def _next_index(state: GameState) -> tuple[int, int]:
    n = len(state.players)
    nxt = (state.current_player_index + 1) % n
    turn = state.current_turn + 1 if nxt == state.leg_starter_index % n else state.current_turn
    return nxt, turn


def _advance(state: GameState) -> GameState:
    nxt, turn = _next_index(state)
    return throw_buffer.clear(replace(state, current_player_index=nxt, current_turn=turn))


def _score_visit(
    state: GameState, player: Player, darts: tuple[str, ...], finisher: Dart | None
) -> VisitResult:
    """
    Rule a visit as bust, checkout or a plain score. `finisher` is the dart
    that reached zero, if any.
    """
    total = calculate_score(darts)
    remaining_before = player.score
    proposed_remaining = remaining_before - total

    bust = False
    checkout = False
    remaining_after = proposed_remaining

    if proposed_remaining < 0 or proposed_remaining == 1:
        bust = True
    elif proposed_remaining == 0:
        if finisher is not None and _qualifies(finisher, state.game_options.out_mode):
            checkout = True
        else:
            bust = True

    if bust:
        remaining_after = remaining_before

    return VisitResult(
        player_id=player.id,
        darts=darts,
        total=total,
        bust=bust,
        checkout=checkout,
        remaining_before=remaining_before,
        remaining_after=remaining_after,
        leg_number=state.leg_number,
        turn=state.current_turn,
    )


def _commit(state: GameState, visit: VisitResult) -> GameState:
    idx = state.current_player_index
    player = state.players[idx]
    history = (*state.history, visit)

    throws = player.throws if visit.voided else (*player.throws, visit.darts)
    player = replace(
        player,
        score=visit.remaining_after,
        throws=throws,
        stats=compute_player_stats(history, player.id, straight_out=_straight_out(state)),
    )
    players = list(state.players)
    players[idx] = player
    state = replace(state, players=tuple(players), history=history)

    if visit.checkout:
        return _win_leg(state, idx)
    return _advance(state)


def _win_leg(state: GameState, idx: int) -> GameState:
    """
    Leg won: count it, roll legs into sets and sets into the match. If the
    match goes on, every player restarts on the starting score and the
    next player in order opens the new leg.
    """
    options = state.game_options
    players = list(state.players)
    winner = replace(players[idx], legs=players[idx].legs + 1)
    players[idx] = winner
    logger.debug("leg %d won by %s", state.leg_number, winner.id)

    set_won = winner.legs >= options.legs_to_win_set
    if set_won:
        winner = replace(winner, sets=winner.sets + 1)
        players[idx] = winner
        logger.debug("set %d won by %s", state.set_number, winner.id)

        if options.sets == 1 or winner.sets >= options.sets_to_win_match:
            logger.info("match won by %s", winner.id)
            return complete_game(replace(state, players=tuple(players)), winner.id)

        players = [replace(p, legs=0) for p in players]

    starter = (state.leg_starter_index + 1) % len(players)
    players = [replace(p, score=options.starting_score, throws=()) for p in players]
    return throw_buffer.clear(
        replace(
            state,
            players=tuple(players),
            leg_starter_index=starter,
            current_player_index=starter,
            current_turn=1,
            leg_number=state.leg_number + 1,
            set_number=state.set_number + 1 if set_won else state.set_number,
        )
    )


def submit_throw(state: GameState) -> GameState:
    """
    Commit the buffered darts as a visit for the current player.

    - Entry gate: until the player has a counted visit this leg, a scoring
      visit must contain a double (double in) or a double or triple
      (master in). Otherwise the visit is voided: no score, turn passes.
    - Bust: the score would go below 0, land on 1, or reach 0 on a dart that
      does not satisfy the out mode. The score stays, the visit is kept
      for dart counts, and the turn passes.
    - Checkout: the leg is won, which may win a set and then the match.
    """
    player = state.current_player
    darts = state.current_throw.darts
    if not state.is_active or player is None or not darts:
        return state

    parsed = [parse_notation(d) for d in darts]
    total = sum(d.score for d in parsed)

    if not player.throws and not _meets_entry(parsed, state.game_options.entry_mode, total):
        logger.debug("visit voided for %s: entry requirement not met", player.id)
        visit = VisitResult(
            player_id=player.id,
            darts=darts,
            total=total,
            bust=False,
            checkout=False,
            remaining_before=player.score,
            remaining_after=player.score,
            leg_number=state.leg_number,
            turn=state.current_turn,
            voided=True,
        )
        return _commit(state, visit)

    visit = _score_visit(state, player, darts, _finishing_dart(parsed, player.score))
    if visit.bust:
        logger.debug("bust for %s on %d", player.id, player.score)
    return _commit(state, visit)


def input_score(state: GameState, score: int, player_id: str | None = None) -> GameState:
    """
    Commit a typed visit total for the current player. An even total that
    checks out is taken to have finished on a double; under master out a
    total of up to 60 divisible by three may finish on a treble instead.
    """
    player = state.current_player
    if not state.is_active or player is None or not is_score_valid(score):
        return state
    if player_id is not None and player_id != player.id:
        return state

    if score % 2 == 0:
        finisher = Dart(score // 2, 2)
    elif state.game_options.out_mode == EntryMode.MASTER and score % 3 == 0 and score <= 60:
        finisher = Dart(score // 3, 3)
    else:
        finisher = Dart(score, 1)
    visit = _score_visit(state, player, (f"S{score}",), finisher)
    return _commit(state, visit)


def undo_score(state: GameState, player_id: str | None = None) -> GameState:
    """
    Revert the most recent visit of the current leg, putting the thrower
    back on the oche with their score and statistics as they were.
    """
    if not state.is_active or not state.history:
        return state
    visit = state.history[-1]
    if visit.leg_number != state.leg_number:
        return state
    if player_id is not None and visit.player_id != player_id:
        return state
    idx = index_of(state.players, visit.player_id)
    if idx < 0:
        return state

    history = state.history[:-1]
    player = state.players[idx]
    player = replace(
        player,
        score=visit.remaining_before,
        throws=player.throws if visit.voided else player.throws[:-1],
        stats=compute_player_stats(history, player.id, straight_out=_straight_out(state)),
    )
    players = list(state.players)
    players[idx] = player
    return throw_buffer.clear(
        replace(
            state,
            players=tuple(players),
            history=history,
            current_player_index=idx,
            current_turn=visit.turn,
        )
    )


def reduce(state: GameState, action: Action) -> GameState:
    if isinstance(action, AddDart):
        return throw_buffer.add_dart(state, action.dart)
    if isinstance(action, RemoveDart):
        return throw_buffer.remove_last_dart(state)
    if isinstance(action, SubmitThrow):
        return submit_throw(state)
    if isinstance(action, InputScore):
        return input_score(state, action.score, action.player_id)
    if isinstance(action, UndoScore):
        return undo_score(state, action.player_id)
    if isinstance(action, EndTurn):
        if not state.is_active or not state.players:
            return state
        return _advance(state)
    return state
