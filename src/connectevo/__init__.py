"""connectevo package."""

from .engine import (  # noqa: F401
    COLS,
    ROWS,
    Board,
    Player,
    board_from_rows,
    serialize_board,
    deserialize_board,
)
from .ai import (  # noqa: F401
    Agent,
    Difficulty,
    EvolutionConfig,
    Population,
    SearchResult,
    TrainingConfig,
    TrainingContext,
)
from .ai.train import train  # noqa: F401
__all__ = [
    "__version__",
    "COLS",
    "ROWS",
    "Board",
    "Player",
    "board_from_rows",
    "serialize_board",
    "deserialize_board",
    "create_app",
    "Agent",
    "Difficulty",
    "EvolutionConfig",
    "Population",
    "SearchResult",
    "TrainingConfig",
    "TrainingContext",
    "train",
]

__version__ = "0.1.0"


def create_app():
    """Lazy import to avoid requiring FastAPI unless requested."""
    from connectevo.api import create_app as factory

    return factory()
