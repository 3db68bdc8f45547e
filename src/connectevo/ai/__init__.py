"""AI components: genome agent with minimax search, evolution and training."""

from .agent import Agent, Difficulty, SearchResult  # noqa: F401
from .population import EvolutionConfig, Population  # noqa: F401
from .train import TrainingConfig, TrainingContext  # noqa: F401
