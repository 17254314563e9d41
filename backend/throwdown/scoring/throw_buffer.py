from __future__ import annotations

from dataclasses import replace

from throwdown.scoring.state import CurrentThrow, GameState

MAX_DARTS = 3

EMPTY = CurrentThrow()


def add_dart(state: GameState, notation: str) -> GameState:
    """
    Append a dart to the current visit. No-op once three darts are held
    or when no game is in progress.
    """
    darts = state.current_throw.darts
    if len(darts) >= MAX_DARTS or not state.is_active:
        return state
    return replace(
        state,
        current_throw=CurrentThrow(
            darts=(*darts, notation),
            is_complete=len(darts) == MAX_DARTS - 1,
        ),
    )


def remove_last_dart(state: GameState) -> GameState:
    darts = state.current_throw.darts
    if not darts:
        return state
    return replace(state, current_throw=CurrentThrow(darts=darts[:-1], is_complete=False))


def clear(state: GameState) -> GameState:
    return replace(state, current_throw=EMPTY)
