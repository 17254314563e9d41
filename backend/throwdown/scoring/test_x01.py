from throwdown.scoring.actions import (
    AddDart,
    AddPlayer,
    EndTurn,
    InputScore,
    RemoveDart,
    StartGame,
    SubmitThrow,
    UndoScore,
)
from throwdown.scoring.engine import dispatch
from throwdown.scoring.state import (
    EntryMode,
    FormatType,
    GameOptions,
    GameState,
    GameStatus,
    GameType,
)
from throwdown.scoring.stats import PlayerStats


def _game(*player_ids: str, **options) -> GameState:
    s = GameState()
    for pid in player_ids:
        s = dispatch(s, AddPlayer(id=pid, name=pid.upper()))
    return dispatch(s, StartGame(game_type=GameType.CUSTOM, game_options=GameOptions(**options)))


def _visit(s: GameState, *darts: str) -> GameState:
    for d in darts:
        s = dispatch(s, AddDart(d))
    return dispatch(s, SubmitThrow())


def test_ton_sixty_from_501() -> None:
    s = _game("a")
    s = _visit(s, "T20", "T20", "D20")

    assert s.players[0].score == 341
    last = s.history[-1]
    assert not last.bust
    assert not last.checkout
    assert s.players[0].throws == (("T20", "T20", "D20"),)
    assert s.current_throw.darts == ()


def test_turn_passes_and_round_counter_wraps() -> None:
    s = _game("a", "b")
    s = _visit(s, "S1")
    assert s.current_player_index == 1
    assert s.current_turn == 1
    s = _visit(s, "S1")
    assert s.current_player_index == 0
    assert s.current_turn == 2


def test_bust_below_zero_keeps_the_score() -> None:
    s = _game("a", "b", starting_score=10)
    s = _visit(s, "T4")

    assert s.players[0].score == 10
    assert s.history[-1].bust
    assert s.current_player_index == 1


def test_leaving_one_is_a_bust() -> None:
    s = _game("a", starting_score=10)
    s = _visit(s, "S9")
    assert s.players[0].score == 10
    assert s.history[-1].bust


def test_double_out_rejects_single_finish() -> None:
    s = _game("a", starting_score=10)
    s = _visit(s, "S10")
    assert s.players[0].score == 10
    assert s.history[-1].bust
    assert s.is_active


def test_straight_out_accepts_single_finish() -> None:
    s = _game("a", starting_score=10, out_mode=EntryMode.STRAIGHT)
    s = _visit(s, "S10")
    assert s.game_status == GameStatus.COMPLETE
    assert s.winner_id == "a"


def test_master_out_accepts_treble_finish() -> None:
    s = _game("a", starting_score=9, out_mode=EntryMode.MASTER)
    s = _visit(s, "T3")
    assert s.winner_id == "a"


def test_darts_after_the_finish_do_not_bust() -> None:
    s = _game("a", starting_score=40)
    s = _visit(s, "D20", "Miss", "Miss")
    assert s.winner_id == "a"


def test_checkout_wins_single_leg_match() -> None:
    s = _game("a", "b", starting_score=10)
    s = _visit(s, "D5")

    assert s.game_status == GameStatus.COMPLETE
    assert s.winner_id == "a"
    assert s.players[0].wins == 1
    assert s.session_stats.player_wins == {"a": 1}
    assert s.session_stats.games_played == 1


def test_double_in_voids_visits_until_a_double_lands() -> None:
    s = _game("a", entry_mode=EntryMode.DOUBLE)

    s = _visit(s, "S20", "S20", "S20")
    assert s.players[0].score == 501
    assert s.history[-1].voided
    assert s.players[0].throws == ()

    s = _visit(s, "D20", "S20")
    assert s.players[0].score == 441

    # Once in, anything counts.
    s = _visit(s, "S20")
    assert s.players[0].score == 421


def test_master_in_accepts_a_treble() -> None:
    s = _game("a", entry_mode=EntryMode.MASTER)
    s = _visit(s, "T20")
    assert s.players[0].score == 441


def test_best_of_three_legs() -> None:
    s = _game("a", "b", starting_score=40, legs=3)

    s = _visit(s, "D20")
    assert s.is_active
    assert s.players[0].legs == 1
    assert s.leg_number == 2
    # Every player restarts and the next player opens the new leg.
    assert [p.score for p in s.players] == [40, 40]
    assert s.current_player_index == 1
    assert s.leg_starter_index == 1

    s = _visit(s, "S1")
    s = _visit(s, "D20")
    assert s.game_status == GameStatus.COMPLETE
    assert s.winner_id == "a"
    assert s.players[0].legs == 2
    assert s.players[0].sets == 1


def test_first_to_counts_every_leg() -> None:
    s = _game("a", "b", starting_score=40, legs=2, format=FormatType.FIRST_TO)
    s = _visit(s, "D20")
    assert s.is_active
    s = _visit(s, "S1")
    s = _visit(s, "D20")
    assert s.winner_id == "a"


def test_sets_roll_up_into_the_match() -> None:
    s = _game("a", "b", starting_score=40, sets=3)

    s = _visit(s, "D20")
    assert s.players[0].sets == 1
    assert s.players[0].legs == 0
    assert s.set_number == 2
    assert s.is_active

    s = _visit(s, "D20")
    assert s.players[1].sets == 1
    assert s.set_number == 3

    s = _visit(s, "D20")
    assert s.winner_id == "a"
    assert s.players[0].sets == 2


def test_undo_restores_the_last_visit() -> None:
    s = _game("a", "b")
    s = _visit(s, "T20", "T20", "T20")
    assert s.players[0].stats.count_180 == 1

    s = dispatch(s, UndoScore())
    assert s.players[0].score == 501
    assert s.players[0].throws == ()
    assert s.players[0].stats == PlayerStats()
    assert s.history == ()
    assert s.current_player_index == 0


def test_undo_for_another_player_is_ignored() -> None:
    s = _game("a", "b")
    s = _visit(s, "S20")
    assert dispatch(s, UndoScore(player_id="b")) is s


def test_undo_does_not_cross_into_the_previous_leg() -> None:
    s = _game("a", "b", starting_score=40, legs=3)
    s = _visit(s, "D20")
    assert dispatch(s, UndoScore()) is s


def test_undo_with_no_history_is_a_no_op() -> None:
    s = _game("a")
    assert dispatch(s, UndoScore()) is s


def test_input_score() -> None:
    s = _game("a", "b")
    s = dispatch(s, InputScore(100))
    assert s.players[0].score == 401
    assert s.current_player_index == 1


def test_input_score_out_of_range_is_ignored() -> None:
    s = _game("a")
    assert dispatch(s, InputScore(181)) is s


def test_input_score_for_wrong_player_is_ignored() -> None:
    s = _game("a", "b")
    assert dispatch(s, InputScore(60, player_id="b")) is s


def test_input_score_even_finish_counts_as_double() -> None:
    s = _game("a", starting_score=40)
    s = dispatch(s, InputScore(40))
    assert s.winner_id == "a"


def test_input_score_master_out_finishes_on_a_treble() -> None:
    s = _game("a", starting_score=57, out_mode=EntryMode.MASTER)
    s = dispatch(s, InputScore(57))
    assert s.winner_id == "a"


def test_input_score_odd_finish_busts_under_double_out() -> None:
    s = _game("a", "b", starting_score=57)
    s = dispatch(s, InputScore(57))
    assert s.game_status == GameStatus.ACTIVE
    assert s.players[0].score == 57


def test_remove_dart_before_submit() -> None:
    s = _game("a")
    s = dispatch(s, AddDart("T20"))
    s = dispatch(s, AddDart("S1"))
    s = dispatch(s, RemoveDart())
    s = dispatch(s, SubmitThrow())
    assert s.players[0].score == 441


def test_end_turn_passes_without_scoring() -> None:
    s = _game("a", "b")
    s = dispatch(s, AddDart("T20"))
    s = dispatch(s, EndTurn())
    assert s.current_player_index == 1
    assert s.players[0].score == 501
    assert s.current_throw.darts == ()


def test_nothing_scores_after_the_match() -> None:
    s = _game("a", starting_score=40)
    s = _visit(s, "D20")
    assert dispatch(s, AddDart("S1")) is s
    assert dispatch(s, InputScore(20)) is s
