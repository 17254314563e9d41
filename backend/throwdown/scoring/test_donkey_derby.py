from dataclasses import replace

from throwdown.scoring.actions import (
    AddDart,
    AddPlayer,
    EndTurn,
    RemoveDart,
    RemovePlayer,
    StartGame,
)
from throwdown.scoring.engine import dispatch
from throwdown.scoring.state import DonkeyDerbyOptions, GameState, GameStatus, GameType


def _derby(progress=(0, 0), finish_line: int = 10) -> GameState:
    s = GameState()
    for pid in ("a", "b"):
        s = dispatch(s, AddPlayer(id=pid, name=pid))
    s = dispatch(
        s,
        StartGame(
            game_type=GameType.DONKEY_DERBY,
            donkey_derby_options=DonkeyDerbyOptions(finish_line=finish_line),
            seed=1,
        ),
    )
    return replace(
        s,
        players=tuple(
            replace(p, segment=seg, donkey_progress=prog)
            for p, seg, prog in zip(s.players, (5, 6), progress)
        ),
    )


def test_own_segment_moves_the_donkey() -> None:
    s = _derby()
    s = dispatch(s, AddDart("T5"))
    assert s.players[0].donkey_progress == 3


def test_finish_line_clamps_and_ends_the_race() -> None:
    s = _derby(progress=(9, 0))
    s = dispatch(s, AddDart("D5"))

    assert s.players[0].donkey_progress == 10
    assert s.game_status == GameStatus.COMPLETE
    assert s.winner_id == "a"
    assert s.players[0].throws[-1] == ("D5",)
    assert s.current_throw.darts == ()


def test_opponent_segment_knocks_back_to_zero_at_most() -> None:
    s = _derby(progress=(0, 2))
    s = dispatch(s, AddDart("T6"))
    assert s.players[1].donkey_progress == 0


def test_remove_dart_undoes_the_knock_back() -> None:
    s = _derby(progress=(0, 2))
    s = dispatch(s, AddDart("T6"))
    s = dispatch(s, RemoveDart())
    assert s.players[1].donkey_progress == 2
    assert s.players[0].triples_hit == 0


def test_unowned_segments_do_nothing() -> None:
    s = _derby(progress=(1, 1))
    s = dispatch(s, AddDart("T20"))
    assert [p.donkey_progress for p in s.players] == [1, 1]


def test_end_turn_passes_and_counts_rounds() -> None:
    s = _derby()
    s = dispatch(s, AddDart("S5"))
    s = dispatch(s, EndTurn())
    assert s.current_player_index == 1
    assert s.players[0].throws == (("S5",),)

    s = dispatch(s, EndTurn())
    assert s.current_player_index == 0
    assert s.current_turn == 2
    assert s.players[0].donkey_progress == 1


def test_player_added_mid_visit_stays_in_the_race() -> None:
    s = _derby()
    s = dispatch(s, AddDart("S5"))
    s = dispatch(s, AddPlayer(id="c", name="c", seed=3))
    s = dispatch(s, AddDart("S5"))

    assert [p.id for p in s.players] == ["a", "b", "c"]
    assert s.players[0].donkey_progress == 2
    assert s.players[2].segment not in (5, 6)
    assert s.players[2].donkey_progress == 0


def test_player_removed_mid_visit_stays_gone() -> None:
    s = _derby(progress=(0, 3))
    s = dispatch(s, AddDart("S5"))
    s = dispatch(s, RemovePlayer(id="b"))
    s = dispatch(s, AddDart("S5"))

    assert [p.id for p in s.players] == ["a"]
    assert s.players[0].donkey_progress == 2


def test_removing_the_thrower_undoes_their_knock_backs() -> None:
    s = _derby(progress=(0, 2))
    s = dispatch(s, AddDart("T6"))
    assert s.players[1].donkey_progress == 0

    s = dispatch(s, RemovePlayer(id="a"))
    assert [p.id for p in s.players] == ["b"]
    assert s.players[0].donkey_progress == 2
    assert s.current_throw.darts == ()
