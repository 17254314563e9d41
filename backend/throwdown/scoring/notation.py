from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

BULL = "Bull"
OUTER = "Outer"
MISS = "Miss"

_PREFIX_MULTIPLIER = {"S": 1, "D": 2, "T": 3}
_MULTIPLIER_PREFIX = {1: "S", 2: "D", 3: "T"}


@dataclass(frozen=True)
class Dart:
    """
    A single dart decoded from its notation.

    - value: 1-20 for standard beds, 25 for bull, 0 for a miss
    - multiplier: 0 (miss), 1 (single), 2 (double), 3 (triple)

    Unlike a board hit, a notation may carry any number (e.g. "D25" or "45"),
    so nothing is validated here; scoring stays fail-soft.
    """

    value: int
    multiplier: int

    @property
    def score(self) -> int:
        return self.value * self.multiplier

    @property
    def is_double(self) -> bool:
        return self.multiplier == 2

    @property
    def is_master(self) -> bool:
        return self.multiplier in (2, 3)

    @property
    def segment(self) -> int | None:
        """Board segment 1-20 hit by this dart, None for bulls and misses."""
        if self.multiplier == 0 or not 1 <= self.value <= 20:
            return None
        return self.value


MISSED = Dart(0, 0)


def _parse_int(text: str) -> int | None:
    text = text.strip()
    if not text or not text.isdigit():
        return None
    return int(text)


def parse_notation(notation: str | None) -> Dart:
    """
    Decode a dart notation token.

    `Bull` is the double bull (25x2), `Outer` the single bull (25x1), a bare
    number is a single of that value. Anything unrecognised is a miss.
    """
    if not notation:
        return MISSED
    notation = notation.strip()
    if notation == BULL:
        return Dart(25, 2)
    if notation == OUTER:
        return Dart(25, 1)

    number = _parse_int(notation)
    if number is not None:
        return Dart(number, 1) if number > 0 else MISSED

    multiplier = _PREFIX_MULTIPLIER.get(notation[:1].upper())
    number = _parse_int(notation[1:])
    if multiplier is None or number is None or number == 0:
        return MISSED
    return Dart(number, multiplier)


def dart_notation_to_score(notation: str | None) -> int:
    return parse_notation(notation).score


def calculate_score(darts: Iterable[str]) -> int:
    return sum(dart_notation_to_score(d) for d in darts)


def make_notation(segment: int, multiplier: int) -> str:
    """
    Build a notation for a board hit. Segment 25 maps onto Outer/Bull.
    """
    if multiplier == 0 or segment == 0:
        return MISS
    if segment == 25:
        return BULL if multiplier == 2 else OUTER
    return f"{_MULTIPLIER_PREFIX[multiplier]}{segment}"


def is_throw_valid(darts: Iterable[str]) -> bool:
    """
    True when every token names a real bed (1-20 with an optional S/D/T
    prefix, Bull, Outer or Miss) and there are at most three of them.

    Advisory only: the engine never refuses a token, so this is reported
    next to the buffer for clients to warn on.
    """
    darts = list(darts)
    if len(darts) > 3:
        return False

    for dart in darts:
        if dart in (BULL, OUTER, MISS):
            continue
        if dart[:1] in _PREFIX_MULTIPLIER:
            number = _parse_int(dart[1:])
        else:
            number = _parse_int(dart)
        if number is None or not 1 <= number <= 20:
            return False
    return True


def is_score_valid(score: int) -> bool:
    return 0 <= score <= 180
