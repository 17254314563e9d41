from __future__ import annotations

import random
from dataclasses import replace

from throwdown.scoring.notation import Dart
from throwdown.scoring.state import Player

BOARD_SEGMENTS = tuple(range(1, 21))


def assign_segments(players: tuple[Player, ...], rng: random.Random) -> tuple[Player, ...]:
    """
    Give every player a distinct random segment 1-20. Players beyond the
    twentieth get no segment.
    """
    drawn = rng.sample(BOARD_SEGMENTS, min(len(players), len(BOARD_SEGMENTS)))
    return tuple(
        replace(p, segment=drawn[i] if i < len(drawn) else None) for i, p in enumerate(players)
    )


def draw_free_segment(players: tuple[Player, ...], rng: random.Random) -> int | None:
    """A random segment nobody holds yet, None once all twenty are taken."""
    taken = {p.segment for p in players}
    free = [s for s in BOARD_SEGMENTS if s not in taken]
    if not free:
        return None
    return rng.choice(free)


def owner_index(players: list[Player] | tuple[Player, ...], segment: int | None) -> int:
    if segment is None:
        return -1
    for i, p in enumerate(players):
        if p.segment == segment:
            return i
    return -1


def count_hit(player: Player, dart: Dart) -> Player:
    """Bump the single/double/triple counters for a dart that hit the board."""
    if dart.multiplier == 1:
        return replace(player, singles_hit=player.singles_hit + 1)
    if dart.multiplier == 2:
        return replace(player, doubles_hit=player.doubles_hit + 1)
    if dart.multiplier == 3:
        return replace(player, triples_hit=player.triples_hit + 1)
    return player
