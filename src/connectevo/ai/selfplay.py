from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from connectevo.engine import Board, Player

from .agent import Agent

if TYPE_CHECKING:
    from .population import EvolutionConfig


@dataclass
class MatchResult:
    winner: Optional[Player]
    plies: int
    end_reason: str  # "win", "draw" or "max_plies"
    board: Board


def play_match(
    first: Agent,
    second: Agent,
    depth: int,
    max_plies: Optional[int] = None,
    board: Optional[Board] = None,
) -> MatchResult:
    """Play first (Player.ONE) against second (Player.TWO).

    A mover that returns no playable column forfeits its ply; the ply
    still counts toward max_plies.
    """
    board = board.copy() if board is not None else Board()
    finished = board.winner()
    if finished is not None or board.is_full():
        return MatchResult(
            winner=finished,
            plies=0,
            end_reason="win" if finished is not None else "draw",
            board=board,
        )
    turn = Player.ONE
    plies = 0
    while max_plies is None or plies < max_plies:
        mover = first if turn is Player.ONE else second
        col = mover.select_move(board, depth, turn)
        if board.is_valid_move(col):
            board.drop(col, turn)
            if board.check_win(turn):
                return MatchResult(winner=turn, plies=plies + 1, end_reason="win", board=board)
        plies += 1
        if board.is_full():
            return MatchResult(winner=None, plies=plies, end_reason="draw", board=board)
        turn = turn.opponent()
    return MatchResult(winner=None, plies=plies, end_reason="max_plies", board=board)


def training_match(agent: Agent, opponent: Agent, config: "EvolutionConfig") -> float:
    """Fitness delta for `agent` after one capped training match as Player.ONE."""
    result = play_match(agent, opponent, depth=config.training_depth, max_plies=config.max_plies)
    if result.winner is Player.ONE:
        return config.win_reward
    if result.winner is Player.TWO:
        return -config.win_reward
    return 0.0


@dataclass
class ExhibitionMatch:
    """Read-only preview of one generation: its champion against the runner-up."""

    generation: int
    champion: Agent
    runner_up: Agent
    board: Board = field(default_factory=Board)
    result: Optional[MatchResult] = None

    def play_out(self, depth: int = 2) -> MatchResult:
        """Play champion vs runner-up from the snapshot board, once."""
        if self.result is None:
            self.result = play_match(self.champion, self.runner_up, depth=depth, board=self.board)
        return self.result
