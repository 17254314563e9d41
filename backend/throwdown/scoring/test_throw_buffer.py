from dataclasses import replace

from throwdown.scoring import throw_buffer
from throwdown.scoring.state import GameState, GameStatus


def _active() -> GameState:
    return replace(GameState(), game_status=GameStatus.ACTIVE)


def test_third_dart_completes_the_visit() -> None:
    s = _active()
    s = throw_buffer.add_dart(s, "T20")
    s = throw_buffer.add_dart(s, "T20")
    assert not s.current_throw.is_complete
    s = throw_buffer.add_dart(s, "D20")
    assert s.current_throw.darts == ("T20", "T20", "D20")
    assert s.current_throw.is_complete


def test_fourth_dart_is_ignored() -> None:
    s = _active()
    for d in ("S1", "S2", "S3"):
        s = throw_buffer.add_dart(s, d)
    assert throw_buffer.add_dart(s, "S4") is s


def test_no_darts_outside_a_game() -> None:
    s = GameState()
    assert throw_buffer.add_dart(s, "S1") is s


def test_remove_last_dart_reopens_the_visit() -> None:
    s = _active()
    for d in ("S1", "S2", "S3"):
        s = throw_buffer.add_dart(s, d)
    s = throw_buffer.remove_last_dart(s)
    assert s.current_throw.darts == ("S1", "S2")
    assert not s.current_throw.is_complete


def test_remove_from_empty_is_a_no_op() -> None:
    s = _active()
    assert throw_buffer.remove_last_dart(s) is s


def test_clear() -> None:
    s = throw_buffer.add_dart(_active(), "S5")
    assert throw_buffer.clear(s).current_throw.darts == ()
