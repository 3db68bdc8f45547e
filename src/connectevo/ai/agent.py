from __future__ import annotations

import math
import random
from enum import Enum
from typing import NamedTuple, Optional, Sequence, Tuple, Union

from connectevo.engine import (
    CENTER_COL,
    EMPTY,
    ROWS,
    WINDOWS,
    Board,
    Player,
)

GENOME_SIZE = 4
GENE_LOW = -10.0
GENE_HIGH = 10.0

# Terminal values dominate any heuristic leaf.
WIN_SCORE = 1e8
WINDOW_WIN_BONUS = 1_000_000.0
CENTER_WEIGHT = 15.0
TWO_WEIGHT = 10.0
THREE_WEIGHT = 100.0
THREAT_WEIGHT = 500.0

Genome = Tuple[float, float, float, float]


class Difficulty(int, Enum):
    """Human-facing difficulty levels, valued as search depth."""

    EASY = 2
    MEDIUM = 4
    HARD = 7
    IMPOSSIBLE = 8

    @classmethod
    def parse(cls, value: Union[str, int]) -> "Difficulty":
        if isinstance(value, str) and not value.strip().isdigit():
            try:
                return cls[value.strip().upper()]
            except KeyError:
                raise ValueError(f"Unknown difficulty: {value}") from None
        try:
            return cls(int(value))
        except ValueError:
            raise ValueError(f"No difficulty with depth {value}") from None


class SearchResult(NamedTuple):
    column: int  # -1 when no legal move exists
    value: float


def validate_genome(genome: Sequence[float]) -> Genome:
    values = tuple(float(g) for g in genome)
    if len(values) != GENOME_SIZE:
        raise ValueError(f"Genome must have {GENOME_SIZE} genes, got {len(values)}")
    if not all(math.isfinite(g) for g in values):
        raise ValueError("Genome genes must be finite numbers")
    return values  # type: ignore[return-value]


class Agent:
    """Linear heuristic player searched with minimax + alpha-beta.

    Genes, in order: center control, two-in-a-row, three-in-a-row and
    opponent three-threat weight. Any sign is allowed.
    """

    __slots__ = ("genome", "fitness", "nodes")

    def __init__(self, genome: Sequence[float], fitness: float = 0.0) -> None:
        self.genome: Genome = validate_genome(genome)
        self.fitness = float(fitness)
        self.nodes = 0

    @classmethod
    def random(cls, rng: random.Random) -> "Agent":
        return cls([rng.uniform(GENE_LOW, GENE_HIGH) for _ in range(GENOME_SIZE)])

    def clone(self) -> "Agent":
        return Agent(self.genome, fitness=self.fitness)

    def __repr__(self) -> str:
        genes = ", ".join(f"{g:.3f}" for g in self.genome)
        return f"Agent(genome=({genes}), fitness={self.fitness:g})"

    # --- heuristic ---
    def evaluate_window(self, window: Sequence[int], player: int) -> float:
        opponent = Player(player).opponent()
        cp = ce = co = 0
        for value in window:
            if value == player:
                cp += 1
            elif value == EMPTY:
                ce += 1
            elif value == opponent:
                co += 1

        score = 0.0
        if cp == 4:
            score += WINDOW_WIN_BONUS
        elif cp == 3 and ce == 1:
            score += self.genome[2] * THREE_WEIGHT
        elif cp == 2 and ce == 2:
            score += self.genome[1] * TWO_WEIGHT

        if co == 3 and ce == 1:
            score -= self.genome[3] * THREAT_WEIGHT
        return score

    def score_board(self, board: Board, player: int) -> float:
        grid = board.grid
        center_count = sum(1 for r in range(ROWS) if grid[r][CENTER_COL] == player)
        score = center_count * self.genome[0] * CENTER_WEIGHT
        for window in WINDOWS:
            score += self.evaluate_window([grid[r][c] for r, c in window], player)
        return score

    # --- search ---
    def search(
        self,
        board: Board,
        depth: int,
        alpha: float = -math.inf,
        beta: float = math.inf,
        maximizing: bool = True,
        player: int = Player.ONE,
    ) -> SearchResult:
        """Minimax with alpha-beta pruning from `player`'s perspective.

        Values: +WIN_SCORE if `player` has four in a row, -WIN_SCORE if the
        opponent has, 0 on a full board, otherwise the heuristic at depth 0.
        The board passed in is never modified.
        """
        if depth < 0:
            raise ValueError("Search depth must be >= 0")
        self.nodes = 0
        return self._minimax(board, depth, alpha, beta, maximizing, Player(player))

    def _minimax(
        self,
        board: Board,
        depth: int,
        alpha: float,
        beta: float,
        maximizing: bool,
        player: Player,
    ) -> SearchResult:
        self.nodes += 1
        opponent = player.opponent()
        if board.check_win(player):
            return SearchResult(-1, WIN_SCORE)
        if board.check_win(opponent):
            return SearchResult(-1, -WIN_SCORE)
        if board.is_full():
            return SearchResult(-1, 0.0)
        if depth == 0:
            return SearchResult(-1, self.score_board(board, player))

        moves = board.ordered_legal_columns()
        best_col = moves[0]
        if maximizing:
            best = -math.inf
            for col in moves:
                child = board.copy()
                child.drop(col, player)
                value = self._minimax(child, depth - 1, alpha, beta, False, player).value
                if value > best:
                    best, best_col = value, col
                alpha = max(alpha, value)
                if beta <= alpha:
                    break
        else:
            best = math.inf
            for col in moves:
                child = board.copy()
                child.drop(col, opponent)
                value = self._minimax(child, depth - 1, alpha, beta, True, player).value
                if value < best:
                    best, best_col = value, col
                beta = min(beta, value)
                if beta <= alpha:
                    break
        return SearchResult(best_col, best)

    def select_move(self, board: Board, depth: int, player: int = Player.ONE) -> int:
        """Column to play for `player`, or -1 when the board has no legal move."""
        return self.search(board, depth, player=player).column


def parse_genome(text: str) -> Optional[Genome]:
    """Parse 'a,b,c,d' into a genome; empty text gives None."""
    if not text or not text.strip():
        return None
    try:
        values = [float(part) for part in text.split(",")]
    except ValueError as exc:
        raise ValueError(f"Invalid genome: {text!r}") from exc
    return validate_genome(values)
