from throwdown.scoring.checkout import (
    CHECKOUT_TABLE,
    GAME_SHOT,
    NO_OUTSHOT,
    UNREACHABLE,
    get_checkout_suggestions,
    route_total,
    suggest_routes,
)
from throwdown.scoring.notation import parse_notation
from throwdown.scoring.state import EntryMode


def test_170_is_the_big_fish() -> None:
    assert get_checkout_suggestions(170, EntryMode.DOUBLE, 3) == ("T20", "T20", "Bull")


def test_nothing_over_170() -> None:
    assert get_checkout_suggestions(171) == (NO_OUTSHOT,)
    assert get_checkout_suggestions(501) == (NO_OUTSHOT,)


def test_bogey_numbers_have_no_outshot() -> None:
    for score in UNREACHABLE:
        assert get_checkout_suggestions(score, EntryMode.DOUBLE) == (NO_OUTSHOT,)


def test_zero_is_game_shot() -> None:
    assert get_checkout_suggestions(0) == (GAME_SHOT,)


def test_table_routes_add_up_and_finish_on_a_double() -> None:
    for score, (primary, backup) in CHECKOUT_TABLE.items():
        for route in (primary, backup):
            if route is None:
                continue
            assert route_total(route) == score, (score, route)
            assert parse_notation(route[-1]).is_double, (score, route)
            assert len(route) <= 3


def test_one_dart_left() -> None:
    assert get_checkout_suggestions(40, EntryMode.DOUBLE, 1) == ("D20",)
    assert get_checkout_suggestions(50, EntryMode.DOUBLE, 1) == ("Bull",)
    # Not finishable with one dart: set up instead.
    assert get_checkout_suggestions(100, EntryMode.DOUBLE, 1) == ("T20",)


def test_two_darts() -> None:
    assert get_checkout_suggestions(70, EntryMode.DOUBLE, 2) == ("T18", "D8")
    assert get_checkout_suggestions(119, EntryMode.DOUBLE, 2) == ("T20",)


def test_out_of_range_darts_mean_a_fresh_visit() -> None:
    assert get_checkout_suggestions(170, EntryMode.DOUBLE, 0) == ("T20", "T20", "Bull")
    assert get_checkout_suggestions(170, EntryMode.DOUBLE, 7) == ("T20", "T20", "Bull")


def test_straight_out() -> None:
    assert get_checkout_suggestions(20, EntryMode.STRAIGHT) == ("S20",)
    assert get_checkout_suggestions(25, EntryMode.STRAIGHT) == ("Outer",)
    assert get_checkout_suggestions(60, EntryMode.STRAIGHT) == ("T20",)
    # Bogey numbers are fine without a double.
    assert route_total(get_checkout_suggestions(159, EntryMode.STRAIGHT)) == 159


def test_master_out_takes_a_treble() -> None:
    assert get_checkout_suggestions(51, EntryMode.MASTER, 1) == ("T17",)


def test_route_search_over_170_is_empty() -> None:
    assert suggest_routes(171, out_mode=EntryMode.DOUBLE) == tuple()


def test_route_search_prefers_d20_for_40() -> None:
    suggestions = suggest_routes(40, out_mode=EntryMode.DOUBLE, limit=3)
    assert suggestions, "expected some suggestions for 40"
    assert suggestions[0].as_strings() == ["D20"]


def test_route_search_finishes_50_on_the_bull() -> None:
    suggestions = suggest_routes(50, out_mode=EntryMode.DOUBLE, limit=3)
    assert suggestions[0].as_strings() == ["Bull"]


def test_route_search_straight_out_allows_singles() -> None:
    suggestions = suggest_routes(3, out_mode=EntryMode.STRAIGHT, limit=10)
    assert len(suggestions[0].darts) == 1
    assert ["S3"] in [s.as_strings() for s in suggestions]
