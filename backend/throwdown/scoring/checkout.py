from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from throwdown.scoring.notation import BULL, Dart, make_notation, parse_notation
from throwdown.scoring.state import EntryMode, OutMode

NO_OUTSHOT = "NO OUTSHOT"
GAME_SHOT = "Game shot!"

# Scores that cannot be finished in three darts on a double (or master) out.
UNREACHABLE: frozenset[int] = frozenset({1, 159, 162, 163, 165, 166, 168, 169})

# Canonical three-dart finishes on a double, primary route first.
_PRIMARY: dict[int, str] = {
    170: "T20 T20 Bull",
    167: "T20 T19 Bull",
    164: "T20 T18 Bull",
    161: "T20 T17 Bull",
    160: "T20 T20 D20",
    158: "T20 T20 D19",
    157: "T20 T19 D20",
    156: "T20 T20 D18",
    155: "T20 T19 D19",
    154: "T20 T18 D20",
    153: "T20 T19 D18",
    152: "T20 T20 D16",
    151: "T20 T17 D20",
    150: "T20 T18 D18",
    149: "T20 T19 D16",
    148: "T20 T16 D20",
    147: "T20 T17 D18",
    146: "T20 T18 D16",
    145: "T20 T15 D20",
    144: "T20 T20 D12",
    143: "T20 T17 D16",
    142: "T20 T14 D20",
    141: "T20 T19 D12",
    140: "T20 T16 D16",
    139: "T20 T13 D20",
    138: "T20 T18 D12",
    137: "T20 T15 D16",
    136: "T20 T20 D8",
    135: "T20 T17 D12",
    134: "T20 T14 D16",
    133: "T20 T19 D8",
    132: "T20 T16 D12",
    131: "T20 T13 D16",
    130: "T20 T20 D5",
    129: "T19 T16 D12",
    128: "T18 T14 D16",
    127: "T20 T17 D8",
    126: "T19 T19 D6",
    125: "T20 T15 D10",
    124: "T20 T16 D8",
    123: "T19 T16 D9",
    122: "T18 T20 D4",
    121: "T20 T11 D14",
    120: "T20 S20 D20",
    119: "T19 T10 D16",
    118: "T20 S18 D20",
    117: "T20 S17 D20",
    116: "T20 S16 D20",
    115: "T20 S15 D20",
    114: "T20 S14 D20",
    113: "T20 S13 D20",
    112: "T20 S12 D20",
    111: "T20 S11 D20",
    110: "T20 S10 D20",
    109: "T20 S9 D20",
    108: "T20 S8 D20",
    107: "T19 S10 D20",
    106: "T20 S6 D20",
    105: "T19 S8 D20",
    104: "T18 S10 D20",
    103: "T17 S12 D20",
    102: "T20 S10 D16",
    101: "T17 S10 D20",
    100: "T20 D20",
    99: "T19 S10 D16",
    98: "T20 D19",
    97: "T19 D20",
    96: "T20 D18",
    95: "T19 D19",
    94: "T18 D20",
    93: "T19 D18",
    92: "T20 D16",
    91: "T17 D20",
    90: "T18 D18",
    89: "T19 D16",
    88: "T20 D14",
    87: "T17 D18",
    86: "T18 D16",
    85: "T15 D20",
    84: "T20 D12",
    83: "T17 D16",
    82: "Bull D16",
    81: "T19 D12",
    80: "T20 D10",
    79: "T13 D20",
    78: "T18 D12",
    77: "T19 D10",
    76: "T20 D8",
    75: "T17 D12",
    74: "T14 D16",
    73: "T19 D8",
    72: "T16 D12",
    71: "T13 D16",
    70: "T18 D8",
    69: "T19 D6",
    68: "T20 D4",
    67: "T17 D8",
    66: "T10 D18",
    65: "T19 D4",
    64: "T16 D8",
    63: "T13 D12",
    62: "T10 D16",
    61: "T15 D8",
    60: "S20 D20",
    59: "S19 D20",
    58: "S18 D20",
    57: "S17 D20",
    56: "S16 D20",
    55: "S15 D20",
    54: "S14 D20",
    53: "S13 D20",
    52: "S12 D20",
    51: "S11 D20",
    50: "S10 D20",
    49: "S9 D20",
    48: "S16 D16",
    47: "S15 D16",
    46: "S14 D16",
    45: "S13 D16",
    44: "S12 D16",
    43: "S11 D16",
    42: "S10 D16",
    41: "S9 D16",
    40: "D20",
    39: "S7 D16",
    38: "D19",
    37: "S5 D16",
    36: "D18",
    35: "S3 D16",
    34: "D17",
    33: "S1 D16",
    32: "D16",
    31: "S15 D8",
    30: "D15",
    29: "S13 D8",
    28: "D14",
    27: "S11 D8",
    26: "D13",
    25: "S9 D8",
    24: "D12",
    23: "S7 D8",
    22: "D11",
    21: "S5 D8",
    20: "D10",
    19: "S3 D8",
    18: "D9",
    17: "S1 D8",
    16: "D8",
    15: "S7 D4",
    14: "D7",
    13: "S5 D4",
    12: "D6",
    11: "S3 D4",
    10: "D5",
    9: "S1 D4",
    8: "D4",
    7: "S3 D2",
    6: "D3",
    5: "S1 D2",
    4: "D2",
    3: "S1 D1",
    2: "D1",
}

# Alternatives used when fewer darts remain than the primary route needs.
_BACKUP: dict[int, str] = {
    88: "T16 D20",
    87: "T19 D15",
    86: "T20 D13",
    85: "T19 D14",
    84: "T16 D18",
    83: "T19 D13",
    82: "T14 D20",
    81: "T15 D18",
    80: "T16 D16",
    79: "T19 D11",
    78: "T14 D18",
    77: "T15 D16",
    76: "T16 D14",
    75: "T13 D18",
    74: "T18 D10",
    73: "T11 D20",
    72: "T12 D18",
    71: "T17 D10",
    70: "S20 Bull",
    69: "S19 Bull",
    68: "T18 D7",
    67: "T9 D20",
    66: "T14 D12",
    65: "T11 D16",
    64: "S14 Bull",
    63: "S13 Bull",
    62: "S12 Bull",
    61: "S11 Bull",
    60: "S10 Bull",
    59: "T17 D4",
    58: "T16 D5",
    57: "T17 D3",
    56: "T16 D4",
    55: "T15 D5",
    54: "T14 D6",
    53: "T13 D7",
    52: "T12 D8",
    51: "T13 D6",
    50: "Bull",
    49: "S17 D16",
}


def _route(text: str) -> tuple[str, ...]:
    return tuple(text.split())


CHECKOUT_TABLE: dict[int, tuple[tuple[str, ...], tuple[str, ...] | None]] = {
    score: (_route(primary), _route(_BACKUP[score]) if score in _BACKUP else None)
    for score, primary in _PRIMARY.items()
}

# Darts aimed at to leave a finish, best leave first.
_PREFERRED_LEAVES: tuple[int, ...] = (40, 32, 16, 8, 4, 2)


@dataclass(frozen=True)
class CheckoutSuggestion:
    """
    A single checkout route (1-3 darts) that finishes exactly.
    """

    darts: tuple[Dart, ...]

    @property
    def total(self) -> int:
        return sum(d.score for d in self.darts)

    def as_strings(self) -> list[str]:
        return [make_notation(d.value, d.multiplier) for d in self.darts]


def _all_scoring_darts() -> tuple[Dart, ...]:
    darts: list[Dart] = []
    for v in range(1, 21):
        darts.append(Dart(v, 1))
        darts.append(Dart(v, 2))
        darts.append(Dart(v, 3))
    darts.append(Dart(25, 1))
    darts.append(Dart(25, 2))
    return tuple(darts)


ALL_DARTS: tuple[Dart, ...] = _all_scoring_darts()


def _is_valid_finish(last: Dart, *, out_mode: OutMode) -> bool:
    if out_mode == EntryMode.DOUBLE:
        return last.is_double
    if out_mode == EntryMode.MASTER:
        return last.is_master
    return True


def _dart_preference_weight(d: Dart) -> int:
    """
    Lower is better.
    - Prefer not using bull unless it is the obvious route.
    - Prefer T20/T19/T18 as setup darts.
    - Prefer common finishing doubles (D20, D16, D18, D10, D8, D12, D6, D4, D2, Bull).
    """
    if d.value == 25:
        return 60 if d.multiplier == 1 else 30

    if d.multiplier == 2:
        common = [20, 16, 18, 10, 8, 12, 6, 4, 2]
        if d.value in common:
            return 0 + common.index(d.value)
        return 15 + (20 - d.value)

    if d.multiplier == 3:
        if d.value in (20, 19, 18, 17, 16):
            return 5 + (20 - d.value)
        return 25 + (20 - d.value)

    return 40 + (20 - d.value)


def _route_weight(route: tuple[Dart, ...]) -> tuple[int, int, int, str]:
    """
    Sort key for routes. Lower tuples are preferred.
    """
    # 1) fewer darts
    # 2) prefer "nicer" finishing doubles
    # 3) prefer preferred setup darts
    # 4) deterministic tie-breaker on formatted string
    finish = route[-1]
    finish_weight = _dart_preference_weight(finish)

    setup_weight = sum(_dart_preference_weight(d) for d in route[:-1])
    formatted = ",".join(make_notation(d.value, d.multiplier) for d in route)
    return (len(route), finish_weight, setup_weight, formatted)


@lru_cache(maxsize=4096)
def suggest_routes(
    remaining: int,
    *,
    out_mode: OutMode = EntryMode.DOUBLE,
    max_darts: int = 3,
    limit: int = 6,
) -> tuple[CheckoutSuggestion, ...]:
    """
    Return up to `limit` finishing routes for a remaining score, best first.

    This searches every bed rather than consulting the canonical table, so it
    also serves straight and master outs.
    """
    if remaining <= 0 or limit <= 0 or max_darts <= 0:
        return tuple()
    max_darts = min(max_darts, 3)
    out_mode = EntryMode(out_mode)

    if remaining > 60 * max_darts:
        return tuple()

    def finishes(target: int) -> list[Dart]:
        return [d for d in ALL_DARTS if d.score == target and _is_valid_finish(d, out_mode=out_mode)]

    suggestions: list[tuple[Dart, ...]] = []

    # 1 dart routes
    for d1 in finishes(remaining):
        suggestions.append((d1,))

    # 2 dart routes
    if max_darts >= 2:
        for d1 in ALL_DARTS:
            r1 = remaining - d1.score
            if r1 <= 0:
                continue
            for d2 in finishes(r1):
                suggestions.append((d1, d2))

    # 3 dart routes
    if max_darts >= 3:
        for d1 in ALL_DARTS:
            r1 = remaining - d1.score
            if r1 <= 0:
                continue
            for d2 in ALL_DARTS:
                r2 = r1 - d2.score
                if r2 <= 0:
                    continue
                for d3 in finishes(r2):
                    suggestions.append((d1, d2, d3))

    suggestions.sort(key=_route_weight)

    seen: set[str] = set()
    out: list[CheckoutSuggestion] = []
    for route in suggestions:
        key = ",".join(make_notation(d.value, d.multiplier) for d in route)
        if key in seen:
            continue
        seen.add(key)
        out.append(CheckoutSuggestion(darts=route))
        if len(out) >= limit:
            break

    return tuple(out)


def _table_route(remaining: int, darts_remaining: int) -> tuple[str, ...] | None:
    entry = CHECKOUT_TABLE.get(remaining)
    if entry is None:
        return None
    primary, backup = entry
    if len(primary) <= darts_remaining:
        return primary
    if backup is not None and len(backup) <= darts_remaining:
        return backup
    return None


def _strategic_target(remaining: int, darts_remaining: int) -> tuple[str, ...]:
    """
    Setup darts for when the score cannot be finished with the darts left.
    """
    if darts_remaining == 1:
        if remaining > 60:
            return ("T20",)
        if remaining > 40:
            return (f"S{remaining - 40}",)
        if remaining % 2 == 0:
            return (f"D{remaining // 2}",)
        for leave in _PREFERRED_LEAVES:
            single = remaining - leave
            if 1 <= single <= 20:
                return (f"S{single}",)
        return ("S1",)

    if darts_remaining == 2:
        if remaining > 110:
            return ("T20",)
        if remaining - 60 >= 2:
            return ("T20",) + _strategic_target(remaining - 60, 1)
        return ("T19",)

    return ("T20",)


def _one_dart(remaining: int, out_mode: OutMode) -> tuple[str, ...]:
    if remaining == 50:
        return (BULL,)
    if remaining % 2 == 0 and remaining <= 40:
        return (f"D{remaining // 2}",)
    if out_mode == EntryMode.MASTER and remaining % 3 == 0 and remaining <= 60:
        return (f"T{remaining // 3}",)
    return _strategic_target(remaining, 1)


def _two_darts(remaining: int, out_mode: OutMode) -> tuple[str, ...]:
    route = _table_route(remaining, 2)
    if route is not None:
        return route
    routes = suggest_routes(remaining, out_mode=out_mode, max_darts=2, limit=1)
    if routes:
        return tuple(routes[0].as_strings())
    return _strategic_target(remaining, 2)


def _three_darts(remaining: int, out_mode: OutMode) -> tuple[str, ...]:
    route = _table_route(remaining, 3)
    if route is not None:
        return route

    # Odd scores: one single first so a preferred double is left.
    if remaining % 2 == 1:
        for leave in _PREFERRED_LEAVES[:3]:
            single = remaining - leave
            if 1 <= single <= 20:
                return (f"S{single}", f"D{leave // 2}")
    elif remaining <= 40:
        return (f"D{remaining // 2}",)
    return _strategic_target(remaining, 3)


def _straight_out(remaining: int, darts_remaining: int) -> tuple[str, ...]:
    if remaining <= 20:
        return (f"S{remaining}",)
    if remaining == 25:
        return ("Outer",)
    if remaining == 50:
        return (BULL,)
    routes = suggest_routes(
        remaining, out_mode=EntryMode.STRAIGHT, max_darts=darts_remaining, limit=1
    )
    if routes:
        return tuple(routes[0].as_strings())
    return _strategic_target(remaining, darts_remaining)


@lru_cache(maxsize=4096)
def get_checkout_suggestions(
    remaining: int, out_mode: OutMode = EntryMode.DOUBLE, darts_remaining: int = 3
) -> tuple[str, ...]:
    """
    Suggest how to finish `remaining` with the darts left in the visit.

    Returns the route as dart notations, `("NO OUTSHOT",)` when the score
    cannot be finished, or `("Game shot!",)` once it has been. When no
    finish is possible with the darts left, a setup route is returned
    instead. Advisory only; re-evaluate after every dart.
    """
    out_mode = EntryMode(out_mode)
    if darts_remaining <= 0 or darts_remaining > 3:
        # Nothing left in this visit: advise for the next one.
        darts_remaining = 3

    if remaining > 170:
        return (NO_OUTSHOT,)
    if remaining <= 0:
        return (GAME_SHOT,)

    if out_mode == EntryMode.STRAIGHT:
        return _straight_out(remaining, darts_remaining)

    if remaining in UNREACHABLE:
        return (NO_OUTSHOT,)

    if darts_remaining == 1:
        return _one_dart(remaining, out_mode)
    if darts_remaining == 2:
        return _two_darts(remaining, out_mode)
    return _three_darts(remaining, out_mode)


def route_total(route: tuple[str, ...]) -> int:
    return sum(parse_notation(d).score for d in route)
