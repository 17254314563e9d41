import json

from throwdown.scoring.actions import AddDart, AddPlayer, EndGame, StartGame, SubmitThrow
from throwdown.scoring.engine import dispatch
from throwdown.scoring.persistence import (
    JsonFileStateSink,
    MemoryStateSink,
    NullStateSink,
    dumps,
    loads,
)
from throwdown.scoring.state import GameState, GameStatus, GameType, KillerOptions
from throwdown.scoring.store import GameStore


def _shanghai_in_progress() -> GameState:
    s = GameState()
    for pid in ("a", "b"):
        s = dispatch(s, AddPlayer(id=pid, name=pid))
    s = dispatch(s, StartGame(game_type=GameType.SHANGHAI))
    for d in ("S1", "D1", "T1"):
        s = dispatch(s, AddDart(d))
    s = dispatch(s, SubmitThrow())
    return dispatch(s, AddDart("S1"))


def test_active_game_survives_a_round_trip() -> None:
    s = _shanghai_in_progress()
    restored = loads(dumps(s))
    assert restored == s
    assert restored.players[0].shanghai_segment_scores == {1: 6}


def test_finished_game_keeps_only_session_stats() -> None:
    s = _shanghai_in_progress()
    s = dispatch(s, EndGame(winner_id="b"))

    restored = loads(dumps(s))
    assert restored.game_status == GameStatus.SETUP
    assert restored.players == ()
    assert restored.session_stats == s.session_stats


def test_null_option_structs_fall_back_to_defaults() -> None:
    raw = json.loads(dumps(_shanghai_in_progress()))
    raw["game"]["killer_options"] = None
    del raw["game"]["donkey_derby_options"]

    restored = loads(json.dumps(raw))
    assert restored.killer_options == KillerOptions()
    assert restored.is_active


def test_json_file_sink(tmp_path) -> None:
    sink = JsonFileStateSink(tmp_path / "state" / "game.json")
    assert sink.load() is None

    s = _shanghai_in_progress()
    sink.save(s)
    assert sink.load() == s


def test_json_file_sink_tolerates_garbage(tmp_path) -> None:
    path = tmp_path / "game.json"
    path.write_text("{not json")
    assert JsonFileStateSink(path).load() is None


def test_store_resumes_from_its_sink() -> None:
    sink = MemoryStateSink()
    store = GameStore(sink)
    store.dispatch(AddPlayer(id="a", name="a"))
    store.dispatch(StartGame(game_type=GameType.G501))
    store.dispatch(AddDart("T20"))
    assert sink.saves == 3

    resumed = GameStore(sink)
    assert resumed.state() == store.state()


class _BrokenSink(NullStateSink):
    def save(self, state: GameState) -> None:
        raise OSError("disk full")


def test_store_survives_a_failing_sink() -> None:
    store = GameStore(_BrokenSink())
    state = store.dispatch(AddPlayer(id="a", name="a"))
    assert [p.id for p in state.players] == ["a"]
    assert store.state() is state


def test_store_clear() -> None:
    store = GameStore()
    store.dispatch(AddPlayer(id="a", name="a"))
    assert store.clear() == GameState()
