from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from throwdown.scoring.state import GameState, VisitResult


@dataclass(frozen=True)
class PlayerStats:
    visits: int = 0
    darts_thrown: int = 0
    scored_points: int = 0
    busts: int = 0
    checkouts: int = 0
    checkout_attempts: int = 0
    highest_visit: int = 0
    last_visit: int = 0
    highest_finish: int = 0
    first_9_points: int = 0
    first_9_darts: int = 0
    best_leg: int = 0  # darts, 0 until a leg is won
    worst_leg: int = 0
    count_180: int = 0
    count_140_plus: int = 0
    count_100_plus: int = 0

    @property
    def three_dart_average(self) -> float:
        if self.darts_thrown == 0:
            return 0.0
        return (self.scored_points / self.darts_thrown) * 3.0

    @property
    def average(self) -> float:
        """Average points per visit."""
        if self.visits == 0:
            return 0.0
        return self.scored_points / self.visits

    @property
    def first_9_average(self) -> float:
        if self.first_9_darts == 0:
            return 0.0
        return (self.first_9_points / self.first_9_darts) * 3.0

    @property
    def checkout_percentage(self) -> float:
        if self.checkout_attempts == 0:
            return 0.0
        return (self.checkouts / self.checkout_attempts) * 100.0


def _is_checkout_attempt(v: VisitResult, *, straight_out: bool) -> bool:
    """
    Heuristic: a 'checkout attempt' is any visit that starts on a finishable score.
    """
    if v.voided or v.remaining_before <= 1:
        return False
    if straight_out:
        return v.remaining_before <= 180
    return v.remaining_before <= 170


def _points(v: VisitResult) -> int:
    # Busted and voided visits score nothing (the score reverts).
    if v.bust or v.voided:
        return 0
    return v.total


def compute_player_stats(
    history: Iterable[VisitResult], player_id: str, *, straight_out: bool = False
) -> PlayerStats:
    v_for_player = [v for v in history if v.player_id == player_id]
    if not v_for_player:
        return PlayerStats()

    scored = [_points(v) for v in v_for_player]

    # First three visits of every leg.
    first_9 = []
    seen_per_leg: dict[int, int] = {}
    for v in v_for_player:
        n = seen_per_leg.get(v.leg_number, 0)
        if n < 3:
            first_9.append(v)
        seen_per_leg[v.leg_number] = n + 1

    # Darts per won leg.
    leg_lengths = []
    for v in v_for_player:
        if v.checkout:
            leg_lengths.append(
                sum(len(x.darts) for x in v_for_player if x.leg_number == v.leg_number)
            )

    finishes = [v.total for v in v_for_player if v.checkout]

    return PlayerStats(
        visits=len(v_for_player),
        darts_thrown=sum(len(v.darts) for v in v_for_player),
        scored_points=sum(scored),
        busts=sum(1 for v in v_for_player if v.bust),
        checkouts=len(finishes),
        checkout_attempts=sum(
            1 for v in v_for_player if _is_checkout_attempt(v, straight_out=straight_out)
        ),
        highest_visit=max(scored),
        last_visit=scored[-1],
        highest_finish=max(finishes) if finishes else 0,
        first_9_points=sum(_points(v) for v in first_9),
        first_9_darts=sum(len(v.darts) for v in first_9),
        best_leg=min(leg_lengths) if leg_lengths else 0,
        worst_leg=max(leg_lengths) if leg_lengths else 0,
        count_180=sum(1 for s in scored if s == 180),
        count_140_plus=sum(1 for s in scored if s >= 140),
        count_100_plus=sum(1 for s in scored if s >= 100),
    )


def compute_game_stats(state: GameState) -> dict[str, PlayerStats]:
    straight_out = state.game_options.out_mode.value == "straight"
    return {
        p.id: compute_player_stats(state.history, p.id, straight_out=straight_out)
        for p in state.players
    }
