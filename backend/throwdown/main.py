from __future__ import annotations

import logging
from typing import Annotated, Literal, Union

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.responses import RedirectResponse
from pydantic import BaseModel, Field, RootModel

from throwdown.config import get_settings
from throwdown.scoring import actions as act
from throwdown.scoring.checkout import get_checkout_suggestions, route_total, suggest_routes
from throwdown.scoring.notation import calculate_score, is_throw_valid
from throwdown.scoring.state import (
    DonkeyDerbyOptions,
    EntryMode,
    FormatType,
    GameOptions,
    GameState,
    GameStatus,
    GameType,
    GameVariant,
    KillerOptions,
    Player,
    SessionStats,
    VisitResult,
)
from throwdown.scoring.stats import PlayerStats, compute_game_stats
from throwdown.scoring.store import get_store
from throwdown.scoring.throw_buffer import MAX_DARTS

settings = get_settings()
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Throwdown")
store = get_store()


@app.get("/", include_in_schema=False)
def root(request: Request):
    # Browsers go to Swagger UI; API clients get the JSON index.
    accept = (request.headers.get("accept") or "").lower()
    if "text/html" in accept:
        return RedirectResponse(url="/docs")
    return {
        "name": "Throwdown",
        "docs": "/docs",
        "health": "/health",
        "endpoints": [
            "GET /game",
            "POST /game/actions",
            "POST /game/reset",
            "GET /game/checkout?remaining=<int>&out_mode=<mode>&darts=<1-3>",
            "GET /game/routes?remaining=<int>&out_mode=<mode>&limit=<int>",
            "GET /game/stats",
        ],
    }


@app.get("/health")
def health():
    return {"status": "ok"}


# --- Action requests, one model per action, tagged by `type` ---


class GameOptionsDTO(BaseModel):
    starting_score: int = Field(default=501, gt=0)
    entry_mode: EntryMode = EntryMode.STRAIGHT
    out_mode: EntryMode = EntryMode.DOUBLE
    format: FormatType = FormatType.BEST_OF
    legs: int = Field(default=1, gt=0)
    sets: int = Field(default=1, gt=0)


class KillerOptionsDTO(BaseModel):
    max_hits: int = Field(default=3, gt=0)


class DonkeyDerbyOptionsDTO(BaseModel):
    finish_line: int = Field(default=10, gt=0)


class AddPlayerRequest(BaseModel):
    type: Literal["ADD_PLAYER"]
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    colour: str | None = None
    seed: int | None = None

    def to_action(self) -> act.AddPlayer:
        return act.AddPlayer(id=self.id, name=self.name, colour=self.colour, seed=self.seed)


class RemovePlayerRequest(BaseModel):
    type: Literal["REMOVE_PLAYER"]
    id: str

    def to_action(self) -> act.RemovePlayer:
        return act.RemovePlayer(id=self.id)


class SetPlayerOrderRequest(BaseModel):
    type: Literal["SET_PLAYER_ORDER"]
    player_ids: list[str]

    def to_action(self) -> act.SetPlayerOrder:
        return act.SetPlayerOrder(player_ids=tuple(self.player_ids))


class StartGameRequest(BaseModel):
    type: Literal["START_GAME"]
    game_type: GameType
    game_options: GameOptionsDTO | None = None
    killer_options: KillerOptionsDTO | None = None
    donkey_derby_options: DonkeyDerbyOptionsDTO | None = None
    seed: int | None = None

    def to_action(self) -> act.StartGame:
        o = self.game_options
        return act.StartGame(
            game_type=self.game_type,
            game_options=GameOptions(
                starting_score=o.starting_score,
                entry_mode=o.entry_mode,
                out_mode=o.out_mode,
                format=o.format,
                legs=o.legs,
                sets=o.sets,
            )
            if o is not None
            else None,
            killer_options=KillerOptions(max_hits=self.killer_options.max_hits)
            if self.killer_options is not None
            else None,
            donkey_derby_options=DonkeyDerbyOptions(
                finish_line=self.donkey_derby_options.finish_line
            )
            if self.donkey_derby_options is not None
            else None,
            seed=self.seed,
        )


class AssignSegmentsRequest(BaseModel):
    type: Literal["ASSIGN_SEGMENTS"]
    seed: int | None = None

    def to_action(self) -> act.AssignSegments:
        return act.AssignSegments(seed=self.seed)


class AddDartRequest(BaseModel):
    type: Literal["ADD_DART"]
    dart: str = Field(..., min_length=1, description="S1-S20, D1-D20, T1-T20, Outer, Bull or Miss")

    def to_action(self) -> act.AddDart:
        return act.AddDart(dart=self.dart)


class RemoveDartRequest(BaseModel):
    type: Literal["REMOVE_DART"]

    def to_action(self) -> act.RemoveDart:
        return act.RemoveDart()


class SubmitThrowRequest(BaseModel):
    type: Literal["SUBMIT_THROW"]

    def to_action(self) -> act.SubmitThrow:
        return act.SubmitThrow()


class InputScoreRequest(BaseModel):
    type: Literal["INPUT_SCORE"]
    score: int = Field(..., ge=0, le=180)
    player_id: str | None = Field(default=None, description="Optional: validate whose turn it is")

    def to_action(self) -> act.InputScore:
        return act.InputScore(score=self.score, player_id=self.player_id)


class ProcessKillerDartHitRequest(BaseModel):
    type: Literal["PROCESS_KILLER_DART_HIT"]
    dart: str | None = None

    def to_action(self) -> act.ProcessKillerDartHit:
        return act.ProcessKillerDartHit(dart=self.dart)


class RemoveKillerDartRequest(BaseModel):
    type: Literal["REMOVE_KILLER_DART"]

    def to_action(self) -> act.RemoveKillerDart:
        return act.RemoveKillerDart()


class KillerSubmitThrowRequest(BaseModel):
    type: Literal["KILLER_SUBMIT_THROW"]

    def to_action(self) -> act.KillerSubmitThrow:
        return act.KillerSubmitThrow()


class EndTurnRequest(BaseModel):
    type: Literal["END_TURN"]

    def to_action(self) -> act.EndTurn:
        return act.EndTurn()


class EndGameRequest(BaseModel):
    type: Literal["END_GAME"]
    winner_id: str

    def to_action(self) -> act.EndGame:
        return act.EndGame(winner_id=self.winner_id)


class UndoScoreRequest(BaseModel):
    type: Literal["UNDO_SCORE"]
    player_id: str | None = None

    def to_action(self) -> act.UndoScore:
        return act.UndoScore(player_id=self.player_id)


class ResetGameRequest(BaseModel):
    type: Literal["RESET_GAME"]

    def to_action(self) -> act.ResetGame:
        return act.ResetGame()


class ActionRequest(RootModel):
    root: Annotated[
        Union[
            AddPlayerRequest,
            RemovePlayerRequest,
            SetPlayerOrderRequest,
            StartGameRequest,
            AssignSegmentsRequest,
            AddDartRequest,
            RemoveDartRequest,
            SubmitThrowRequest,
            InputScoreRequest,
            ProcessKillerDartHitRequest,
            RemoveKillerDartRequest,
            KillerSubmitThrowRequest,
            EndTurnRequest,
            EndGameRequest,
            UndoScoreRequest,
            ResetGameRequest,
        ],
        Field(discriminator="type"),
    ]


# --- Responses ---


class PlayerStatsDTO(BaseModel):
    visits: int
    darts_thrown: int
    scored_points: int
    busts: int
    checkouts: int
    checkout_attempts: int
    checkout_percentage: float
    highest_visit: int
    last_visit: int
    highest_finish: int
    best_leg: int
    worst_leg: int
    count_180: int
    count_140_plus: int
    count_100_plus: int
    three_dart_average: float
    average: float
    first_9_average: float


class PlayerDTO(BaseModel):
    id: str
    name: str
    colour: str
    score: int
    throws: list[list[str]]
    wins: int
    legs: int
    sets: int
    stats: PlayerStatsDTO
    segment: int | None
    is_killer: bool
    segment_hits: int
    is_eliminated: bool
    players_eliminated: int
    singles_hit: int
    doubles_hit: int
    triples_hit: int
    shanghais_hit: int
    shanghai_segment_scores: dict[int, int]
    donkey_progress: int


class CurrentThrowDTO(BaseModel):
    darts: list[str]
    is_complete: bool
    total: int
    # Advisory; false when a buffered token is not a real bed.
    is_valid: bool


class VisitResultDTO(BaseModel):
    player_id: str
    darts: list[str]
    total: int
    bust: bool
    checkout: bool
    voided: bool
    remaining_before: int
    remaining_after: int
    leg_number: int
    turn: int


class SessionStatsDTO(BaseModel):
    player_wins: dict[str, int]
    games_played: int


class GameStateDTO(BaseModel):
    game_type: GameType
    variant: GameVariant
    game_status: GameStatus
    game_options: GameOptionsDTO
    killer_options: KillerOptionsDTO
    donkey_derby_options: DonkeyDerbyOptionsDTO
    players: list[PlayerDTO]
    current_player_index: int
    current_player_id: str | None
    current_turn: int
    leg_starter_index: int
    set_number: int
    leg_number: int
    shanghai_segment: int
    current_throw: CurrentThrowDTO
    winner_id: str | None
    checkout: list[str] | None = Field(
        default=None, description="Suggested finish for the player on the oche (X01 only)"
    )
    last_visit: VisitResultDTO | None
    history: list[VisitResultDTO]
    session_stats: SessionStatsDTO


class CheckoutResponseDTO(BaseModel):
    remaining: int
    out_mode: EntryMode
    darts_remaining: int
    route: list[str]
    total: int


class RouteDTO(BaseModel):
    darts: list[str]
    total: int


class RoutesResponseDTO(BaseModel):
    remaining: int
    out_mode: EntryMode
    routes: list[RouteDTO]


class PlayerGameStatsDTO(BaseModel):
    player_id: str
    name: str
    stats: PlayerStatsDTO


class GameStatsDTO(BaseModel):
    players: list[PlayerGameStatsDTO]
    session: SessionStatsDTO


def _stats_to_dto(s: PlayerStats) -> PlayerStatsDTO:
    return PlayerStatsDTO(
        visits=s.visits,
        darts_thrown=s.darts_thrown,
        scored_points=s.scored_points,
        busts=s.busts,
        checkouts=s.checkouts,
        checkout_attempts=s.checkout_attempts,
        checkout_percentage=s.checkout_percentage,
        highest_visit=s.highest_visit,
        last_visit=s.last_visit,
        highest_finish=s.highest_finish,
        best_leg=s.best_leg,
        worst_leg=s.worst_leg,
        count_180=s.count_180,
        count_140_plus=s.count_140_plus,
        count_100_plus=s.count_100_plus,
        three_dart_average=s.three_dart_average,
        average=s.average,
        first_9_average=s.first_9_average,
    )


def _player_to_dto(p: Player) -> PlayerDTO:
    return PlayerDTO(
        id=p.id,
        name=p.name,
        colour=p.colour,
        score=p.score,
        throws=[list(t) for t in p.throws],
        wins=p.wins,
        legs=p.legs,
        sets=p.sets,
        stats=_stats_to_dto(p.stats),
        segment=p.segment,
        is_killer=p.is_killer,
        segment_hits=p.segment_hits,
        is_eliminated=p.is_eliminated,
        players_eliminated=p.players_eliminated,
        singles_hit=p.singles_hit,
        doubles_hit=p.doubles_hit,
        triples_hit=p.triples_hit,
        shanghais_hit=p.shanghais_hit,
        shanghai_segment_scores=dict(p.shanghai_segment_scores),
        donkey_progress=p.donkey_progress,
    )


def _visit_to_dto(v: VisitResult) -> VisitResultDTO:
    return VisitResultDTO(
        player_id=v.player_id,
        darts=list(v.darts),
        total=v.total,
        bust=v.bust,
        checkout=v.checkout,
        voided=v.voided,
        remaining_before=v.remaining_before,
        remaining_after=v.remaining_after,
        leg_number=v.leg_number,
        turn=v.turn,
    )


def _session_to_dto(s: SessionStats) -> SessionStatsDTO:
    return SessionStatsDTO(player_wins=dict(s.player_wins), games_played=s.games_played)


def _live_checkout(s: GameState) -> list[str] | None:
    player = s.current_player
    if not s.is_active or s.variant != GameVariant.X01 or player is None:
        return None
    darts = s.current_throw.darts
    remaining = player.score - calculate_score(darts)
    return list(
        get_checkout_suggestions(
            remaining,
            out_mode=s.game_options.out_mode,
            darts_remaining=MAX_DARTS - len(darts),
        )
    )


def _state_to_dto(s: GameState) -> GameStateDTO:
    o = s.game_options
    current = s.current_player
    return GameStateDTO(
        game_type=s.game_type,
        variant=s.variant,
        game_status=s.game_status,
        game_options=GameOptionsDTO(
            starting_score=o.starting_score,
            entry_mode=o.entry_mode,
            out_mode=o.out_mode,
            format=o.format,
            legs=o.legs,
            sets=o.sets,
        ),
        killer_options=KillerOptionsDTO(max_hits=s.killer_options.max_hits),
        donkey_derby_options=DonkeyDerbyOptionsDTO(
            finish_line=s.donkey_derby_options.finish_line
        ),
        players=[_player_to_dto(p) for p in s.players],
        current_player_index=s.current_player_index,
        current_player_id=current.id if current is not None else None,
        current_turn=s.current_turn,
        leg_starter_index=s.leg_starter_index,
        set_number=s.set_number,
        leg_number=s.leg_number,
        shanghai_segment=s.shanghai_segment,
        current_throw=CurrentThrowDTO(
            darts=list(s.current_throw.darts),
            is_complete=s.current_throw.is_complete,
            total=calculate_score(s.current_throw.darts),
            is_valid=is_throw_valid(s.current_throw.darts),
        ),
        winner_id=s.winner_id,
        checkout=_live_checkout(s),
        last_visit=_visit_to_dto(s.history[-1]) if s.history else None,
        history=[_visit_to_dto(v) for v in s.history],
        session_stats=_session_to_dto(s.session_stats),
    )


@app.get("/game", response_model=GameStateDTO)
def get_game_state() -> GameStateDTO:
    return _state_to_dto(store.state())


@app.post("/game/actions", response_model=GameStateDTO)
def apply_action(req: ActionRequest) -> GameStateDTO:
    try:
        action = req.root.to_action()
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    return _state_to_dto(store.dispatch(action))


@app.post("/game/reset", response_model=GameStateDTO)
def reset_game() -> GameStateDTO:
    return _state_to_dto(store.dispatch(act.ResetGame()))


@app.get("/game/checkout", response_model=CheckoutResponseDTO)
def checkout_suggestion(
    remaining: int,
    out_mode: EntryMode | None = None,
    darts: int = Query(default=3, ge=1, le=3),
) -> CheckoutResponseDTO:
    mode = out_mode if out_mode is not None else store.state().game_options.out_mode
    route = get_checkout_suggestions(remaining, out_mode=mode, darts_remaining=darts)
    return CheckoutResponseDTO(
        remaining=remaining,
        out_mode=mode,
        darts_remaining=darts,
        route=list(route),
        total=route_total(route),
    )


@app.get("/game/routes", response_model=RoutesResponseDTO)
def checkout_routes(
    remaining: int,
    out_mode: EntryMode | None = None,
    limit: int = Query(default=6, ge=1, le=20),
) -> RoutesResponseDTO:
    mode = out_mode if out_mode is not None else store.state().game_options.out_mode
    routes = suggest_routes(remaining, out_mode=mode, max_darts=3, limit=limit)
    return RoutesResponseDTO(
        remaining=remaining,
        out_mode=mode,
        routes=[RouteDTO(darts=r.as_strings(), total=r.total) for r in routes],
    )


@app.get("/game/stats", response_model=GameStatsDTO)
def game_stats() -> GameStatsDTO:
    state = store.state()
    stats = compute_game_stats(state)
    return GameStatsDTO(
        players=[
            PlayerGameStatsDTO(player_id=p.id, name=p.name, stats=_stats_to_dto(stats[p.id]))
            for p in state.players
        ],
        session=_session_to_dto(state.session_stats),
    )
