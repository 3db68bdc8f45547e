from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from connectevo.ai.agent import Agent, Difficulty
from connectevo.ai.population import EvolutionConfig, GenerationStats
from connectevo.ai.selfplay import ExhibitionMatch
from connectevo.ai.train import (
    GENERATIONS_PER_BATCH,
    TOTAL_BATCHES,
    TrainingConfig,
    TrainingContext,
    evolve_one_generation,
    init_population,
    run_batch,
)
from connectevo.engine import Board, Player, serialize_board

DEFAULT_GENOME = (1.0, 1.0, 1.0, 1.0)


class CreateTrainingRequest(BaseModel):
    seed: Optional[int] = None
    batches: int = TOTAL_BATCHES
    generations_per_batch: int = GENERATIONS_PER_BATCH
    population_size: int = 50
    elite_count: int = 10
    training_depth: int = 4
    max_plies: int = 30
    preview_depth: int = 2


class CreateMatchRequest(BaseModel):
    difficulty: Union[str, int] = "medium"
    genome: Optional[List[float]] = None
    training_id: Optional[str] = None
    human_first: bool = True


class MoveRequest(BaseModel):
    column: int


class AgentPayload(BaseModel):
    genome: List[float]
    fitness: float


class TrainingResponse(BaseModel):
    id: str
    batch: int
    total_batches: int
    generation: int
    total_generations: int
    finished: bool
    champion: Optional[AgentPayload] = None
    best_agent: Optional[AgentPayload] = None
    stats: Optional[Dict] = None
    exhibitions: List[Dict] = []


class MatchResponse(BaseModel):
    id: str
    difficulty: str
    depth: int
    human: int
    agent: AgentPayload
    turn: int
    finished: bool
    winner: Optional[int] = None
    last_agent_move: Optional[int] = None
    state: Dict


@dataclass
class Match:
    id: str
    agent: Agent
    difficulty: Difficulty
    human: Player
    board: Board = field(default_factory=Board)
    turn: Player = Player.ONE
    winner: Optional[Player] = None
    last_agent_move: Optional[int] = None

    @property
    def finished(self) -> bool:
        return self.winner is not None or self.board.is_full()


def agent_payload(agent: Optional[Agent]) -> Optional[AgentPayload]:
    if agent is None:
        return None
    return AgentPayload(genome=list(agent.genome), fitness=agent.fitness)


def stats_payload(stats: Optional[GenerationStats]) -> Optional[Dict]:
    if stats is None:
        return None
    return {
        "generation": stats.generation,
        "best_fitness": stats.best_fitness,
        "avg_fitness": stats.avg_fitness,
        "min_fitness": stats.min_fitness,
        "wins": stats.wins,
        "losses": stats.losses,
        "draws": stats.draws,
    }


def exhibition_payload(ex: ExhibitionMatch, depth: int) -> Dict:
    result = ex.play_out(depth)
    return {
        "generation": ex.generation,
        "champion": list(ex.champion.genome),
        "runner_up": list(ex.runner_up.genome),
        "start": serialize_board(ex.board),
        "board": serialize_board(result.board),
        "winner": int(result.winner) if result.winner is not None else None,
        "plies": result.plies,
        "end_reason": result.end_reason,
    }


def create_app() -> FastAPI:
    app = FastAPI(title="connectevo API")
    sessions: Dict[str, TrainingContext] = {}
    matches: Dict[str, Match] = {}

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def serialize_training(session_id: str, context: TrainingContext) -> Dict:
        return {
            "id": session_id,
            "batch": context.batch,
            "total_batches": context.config.total_batches,
            "generation": context.generation,
            "total_generations": context.config.total_generations,
            "finished": context.finished,
            "champion": agent_payload(context.population.champion),
            "best_agent": agent_payload(context.best_agent),
            "stats": stats_payload(context.population.last_stats),
            "exhibitions": [
                exhibition_payload(ex, context.config.preview_depth)
                for ex in context.exhibitions
            ],
        }

    def serialize_match(match: Match) -> Dict:
        winner = match.winner
        return {
            "id": match.id,
            "difficulty": match.difficulty.name.lower(),
            "depth": int(match.difficulty),
            "human": int(match.human),
            "agent": agent_payload(match.agent),
            "turn": int(match.turn),
            "finished": match.finished,
            "winner": int(winner) if winner is not None else None,
            "last_agent_move": match.last_agent_move,
            "state": serialize_board(match.board),
        }

    def require_session(session_id: str) -> TrainingContext:
        context = sessions.get(session_id)
        if context is None:
            raise HTTPException(status_code=404, detail="Training session not found")
        return context

    def require_match(match_id: str) -> Match:
        match = matches.get(match_id)
        if match is None:
            raise HTTPException(status_code=404, detail="Match not found")
        return match

    def apply_column(match: Match, col: int) -> None:
        match.board.drop(col, match.turn)
        if match.board.check_win(match.turn):
            match.winner = match.turn
        else:
            match.turn = match.turn.opponent()

    def run_agent_turn(match: Match) -> None:
        if match.finished or match.turn is match.human:
            return
        col = match.agent.select_move(match.board, int(match.difficulty), match.turn)
        if not match.board.is_valid_move(col):
            return
        match.last_agent_move = col
        apply_column(match, col)

    @app.get("/health")
    async def health() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/training", response_model=TrainingResponse)
    async def create_training(req: CreateTrainingRequest) -> TrainingResponse:
        config = TrainingConfig(
            generations_per_batch=req.generations_per_batch,
            total_batches=req.batches,
            preview_depth=req.preview_depth,
            seed=req.seed,
            progress_every=0,
            evolution=EvolutionConfig(
                population_size=req.population_size,
                elite_count=req.elite_count,
                training_depth=req.training_depth,
                max_plies=req.max_plies,
            ),
        )
        try:
            context = init_population(config)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        session_id = uuid.uuid4().hex[:8]
        sessions[session_id] = context
        return TrainingResponse(**serialize_training(session_id, context))

    @app.get("/training/{session_id}", response_model=TrainingResponse)
    async def get_training(session_id: str) -> TrainingResponse:
        context = require_session(session_id)
        return TrainingResponse(**serialize_training(session_id, context))

    @app.post("/training/{session_id}/generation", response_model=TrainingResponse)
    async def step_generation(session_id: str) -> TrainingResponse:
        context = require_session(session_id)
        if context.finished:
            raise HTTPException(status_code=400, detail="Training already finished")
        evolve_one_generation(context)
        return TrainingResponse(**serialize_training(session_id, context))

    @app.post("/training/{session_id}/batch", response_model=TrainingResponse)
    async def step_batch(session_id: str) -> TrainingResponse:
        context = require_session(session_id)
        if context.finished:
            raise HTTPException(status_code=400, detail="Training already finished")
        run_batch(context)
        return TrainingResponse(**serialize_training(session_id, context))

    @app.post("/match", response_model=MatchResponse)
    async def create_match(req: CreateMatchRequest) -> MatchResponse:
        try:
            difficulty = Difficulty.parse(req.difficulty)
            if req.training_id is not None:
                context = require_session(req.training_id)
                source = context.best_agent or context.population.champion
                if source is None:
                    raise HTTPException(status_code=400, detail="Training has no champion yet")
                agent = source.clone()
            else:
                agent = Agent(req.genome if req.genome is not None else DEFAULT_GENOME)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        match = Match(
            id=uuid.uuid4().hex[:8],
            agent=agent,
            difficulty=difficulty,
            human=Player.ONE if req.human_first else Player.TWO,
        )
        run_agent_turn(match)
        matches[match.id] = match
        return MatchResponse(**serialize_match(match))

    @app.get("/match/{match_id}", response_model=MatchResponse)
    async def get_match(match_id: str) -> MatchResponse:
        match = require_match(match_id)
        return MatchResponse(**serialize_match(match))

    @app.post("/match/{match_id}/move", response_model=MatchResponse)
    async def play_move(match_id: str, body: MoveRequest) -> MatchResponse:
        match = require_match(match_id)
        if match.finished:
            raise HTTPException(status_code=400, detail="Match already finished")
        if match.turn is not match.human:
            raise HTTPException(status_code=400, detail="Not the human player's turn")
        if not match.board.is_valid_move(body.column):
            raise HTTPException(status_code=400, detail=f"Column {body.column} is not playable")
        apply_column(match, body.column)
        run_agent_turn(match)
        return MatchResponse(**serialize_match(match))

    return app
