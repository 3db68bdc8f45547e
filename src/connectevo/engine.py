"""Board rules for Connect Four.

The engine is deterministic and UI-agnostic so it can be shared by the
search, the training loop and any client. Cells are addressed as (row, col)
with row 0 at the top of the board and row ROWS - 1 at the bottom.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

ROWS = 6
COLS = 7
CONNECT = 4
CENTER_COL = COLS // 2
EMPTY = 0
# Center-out ordering lets alpha-beta cut earlier.
COLUMN_ORDER: Tuple[int, ...] = (3, 2, 4, 1, 5, 0, 6)
Cell = Tuple[int, int]  # (row, col), zero-based

SYMBOLS = {EMPTY: ".", 1: "X", 2: "O"}


class Player(int, Enum):
    ONE = 1
    TWO = 2

    def opponent(self) -> "Player":
        return Player.TWO if self is Player.ONE else Player.ONE


def _build_windows() -> List[Tuple[Cell, ...]]:
    windows: List[Tuple[Cell, ...]] = []
    # Horizontal
    for r in range(ROWS):
        for c in range(COLS - CONNECT + 1):
            windows.append(tuple((r, c + i) for i in range(CONNECT)))
    # Vertical
    for c in range(COLS):
        for r in range(ROWS - CONNECT + 1):
            windows.append(tuple((r + i, c) for i in range(CONNECT)))
    # Diagonal down-right
    for r in range(ROWS - CONNECT + 1):
        for c in range(COLS - CONNECT + 1):
            windows.append(tuple((r + i, c + i) for i in range(CONNECT)))
    # Diagonal up-right
    for r in range(CONNECT - 1, ROWS):
        for c in range(COLS - CONNECT + 1):
            windows.append(tuple((r - i, c + i) for i in range(CONNECT)))
    return windows


# Every run of four cells on the board, in scan order.
WINDOWS: Sequence[Tuple[Cell, ...]] = tuple(_build_windows())


@dataclass
class Board:
    grid: List[List[int]] = field(
        default_factory=lambda: [[EMPTY] * COLS for _ in range(ROWS)]
    )

    def reset(self) -> None:
        for row in self.grid:
            for c in range(COLS):
                row[c] = EMPTY

    def copy(self) -> "Board":
        return Board(grid=[list(row) for row in self.grid])

    def cell(self, row: int, col: int) -> int:
        return self.grid[row][col]

    def is_valid_move(self, col: int) -> bool:
        return 0 <= col < COLS and self.grid[0][col] == EMPTY

    def lowest_empty_row(self, col: int) -> Optional[int]:
        if not 0 <= col < COLS:
            return None
        for r in range(ROWS - 1, -1, -1):
            if self.grid[r][col] == EMPTY:
                return r
        return None

    def drop(self, col: int, player: int) -> Optional[int]:
        """Place a piece in the lowest empty row of col.

        Full or out-of-range columns are ignored; callers check
        is_valid_move first. Returns the row that was filled, if any.
        """
        row = self.lowest_empty_row(col)
        if row is not None:
            self.grid[row][col] = int(player)
        return row

    def check_win(self, player: int) -> bool:
        p = int(player)
        g = self.grid
        # Horizontal
        for r in range(ROWS):
            for c in range(COLS - 3):
                if g[r][c] == p and g[r][c + 1] == p and g[r][c + 2] == p and g[r][c + 3] == p:
                    return True
        # Vertical
        for r in range(ROWS - 3):
            for c in range(COLS):
                if g[r][c] == p and g[r + 1][c] == p and g[r + 2][c] == p and g[r + 3][c] == p:
                    return True
        # Diagonal down-right
        for r in range(ROWS - 3):
            for c in range(COLS - 3):
                if g[r][c] == p and g[r + 1][c + 1] == p and g[r + 2][c + 2] == p and g[r + 3][c + 3] == p:
                    return True
        # Diagonal up-right
        for r in range(3, ROWS):
            for c in range(COLS - 3):
                if g[r][c] == p and g[r - 1][c + 1] == p and g[r - 2][c + 2] == p and g[r - 3][c + 3] == p:
                    return True
        return False

    def is_full(self) -> bool:
        return all(self.grid[0][c] != EMPTY for c in range(COLS))

    def winner(self) -> Optional[Player]:
        for player in Player:
            if self.check_win(player):
                return player
        return None

    def is_draw(self) -> bool:
        return self.is_full() and self.winner() is None

    def is_terminal(self) -> bool:
        return self.check_win(Player.ONE) or self.check_win(Player.TWO) or self.is_full()

    def legal_columns(self) -> List[int]:
        return [c for c in range(COLS) if self.grid[0][c] == EMPTY]

    def ordered_legal_columns(self) -> List[int]:
        return [c for c in COLUMN_ORDER if self.grid[0][c] == EMPTY]

    def piece_count(self) -> int:
        return sum(1 for row in self.grid for value in row if value != EMPTY)

    def render(self) -> str:
        """ASCII grid, column numbers on top."""
        header = " " + " ".join(str(c) for c in range(COLS))
        lines = ["|" + "|".join(SYMBOLS[v] for v in row) + "|" for row in self.grid]
        return "\n".join([header] + lines)


def _check_gravity(grid: List[List[int]]) -> None:
    for c in range(COLS):
        seen_empty_below = False
        for r in range(ROWS - 1, -1, -1):
            if grid[r][c] == EMPTY:
                seen_empty_below = True
            elif seen_empty_below:
                raise ValueError(f"Floating piece at row {r}, column {c}")


def board_from_rows(rows: Iterable[str]) -> Board:
    """Build a board from strings of '.', 'X' and 'O', top row first."""
    lookup = {".": EMPTY, "X": int(Player.ONE), "O": int(Player.TWO)}
    grid: List[List[int]] = []
    for line in rows:
        token = line.strip().upper()
        if len(token) != COLS:
            raise ValueError(f"Row must have {COLS} cells: {line!r}")
        try:
            grid.append([lookup[ch] for ch in token])
        except KeyError as exc:
            raise ValueError(f"Invalid cell symbol in row {line!r}") from exc
    if len(grid) != ROWS:
        raise ValueError(f"Board must have {ROWS} rows, got {len(grid)}")
    _check_gravity(grid)
    return Board(grid=grid)


def serialize_board(board: Board) -> Dict:
    """Serialize a Board to a JSON-friendly dict."""
    winner = board.winner()
    return {
        "rows": [list(row) for row in board.grid],
        "winner": int(winner) if winner is not None else None,
        "draw": board.is_full() and winner is None,
        "legal": board.legal_columns(),
    }


def deserialize_board(payload: Dict) -> Board:
    rows = payload.get("rows")
    if not isinstance(rows, list) or len(rows) != ROWS:
        raise ValueError(f"Board payload must contain {ROWS} rows")
    grid: List[List[int]] = []
    for row in rows:
        if not isinstance(row, list) or len(row) != COLS:
            raise ValueError(f"Each row must contain {COLS} cells")
        values = [int(v) for v in row]
        if any(v not in (EMPTY, Player.ONE, Player.TWO) for v in values):
            raise ValueError("Cell values must be 0, 1 or 2")
        grid.append(values)
    _check_gravity(grid)
    return Board(grid=grid)
