from __future__ import annotations

import os
import random
import time
from dataclasses import dataclass, field
from typing import List, Optional

from .agent import Agent
from .population import EvolutionConfig, Population
from .selfplay import ExhibitionMatch

GENERATIONS_PER_BATCH = 10
TOTAL_BATCHES = 5
# Older menus advertised "100 generations"; the loop runs batches x generations.
TOTAL_GENERATIONS = GENERATIONS_PER_BATCH * TOTAL_BATCHES


def _env_int(name: str) -> Optional[int]:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclass
class TrainingConfig:
    generations_per_batch: int = GENERATIONS_PER_BATCH
    total_batches: int = TOTAL_BATCHES
    preview_depth: int = 2
    seed: Optional[int] = None
    progress_every: int = 1
    evolution: EvolutionConfig = field(default_factory=EvolutionConfig)

    @property
    def total_generations(self) -> int:
        return self.generations_per_batch * self.total_batches

    def validate(self) -> "TrainingConfig":
        if self.generations_per_batch <= 0:
            raise ValueError("generations_per_batch must be > 0")
        if self.total_batches <= 0:
            raise ValueError("total_batches must be > 0")
        if self.preview_depth < 0:
            raise ValueError("preview_depth must be >= 0")
        self.evolution.validate()
        return self

    @classmethod
    def from_env(cls) -> "TrainingConfig":
        """Defaults overridden by CONNECTEVO_SEED/BATCHES/GENERATIONS."""
        config = cls()
        seed = _env_int("CONNECTEVO_SEED")
        batches = _env_int("CONNECTEVO_BATCHES")
        generations = _env_int("CONNECTEVO_GENERATIONS")
        if seed is not None:
            config.seed = seed
        if batches is not None:
            config.total_batches = batches
        if generations is not None:
            config.generations_per_batch = generations
        return config


@dataclass
class TrainingContext:
    """Everything one training run owns; passed explicitly to each step."""

    config: TrainingConfig
    rng: random.Random
    population: Population
    best_agent: Optional[Agent] = None
    batch: int = 0
    generation: int = 0
    exhibitions: List[ExhibitionMatch] = field(default_factory=list)

    @property
    def finished(self) -> bool:
        return self.batch >= self.config.total_batches


def init_population(config: Optional[TrainingConfig] = None) -> TrainingContext:
    """Fresh random generation 0 with counters at zero."""
    config = (config or TrainingConfig()).validate()
    rng = random.Random(config.seed)
    population = Population(config.evolution, rng=rng)
    population.initialize()
    return TrainingContext(config=config, rng=rng, population=population)


def evolve_one_generation(context: TrainingContext) -> Agent:
    """Run one evaluate+reproduce cycle and record its exhibition snapshot.

    The first generation of a batch clears the previous batch's exhibitions;
    the last one stores best_agent and closes the batch.
    """
    if context.finished:
        raise RuntimeError("All training batches have already run.")
    config = context.config
    if context.generation % config.generations_per_batch == 0:
        context.exhibitions = []
    champion = context.population.evolve_one_generation()
    context.generation += 1
    runner_up = context.population.runner_up or champion
    context.exhibitions.append(
        ExhibitionMatch(
            generation=context.generation,
            champion=champion.clone(),
            runner_up=runner_up.clone(),
        )
    )

    stats = context.population.last_stats
    should_log = config.progress_every > 0 and context.generation % config.progress_every == 0
    if should_log and stats is not None:
        genes = ",".join(f"{g:.2f}" for g in champion.genome)
        print(
            f"[train] batch {context.batch + 1}/{config.total_batches} "
            f"gen {context.generation}/{config.total_generations} "
            f"best={stats.best_fitness:+.0f} "
            f"avg={stats.avg_fitness:+.1f} "
            f"min={stats.min_fitness:+.0f} "
            f"w/l/d={stats.wins}/{stats.losses}/{stats.draws} "
            f"champion=({genes})",
            flush=True,
        )

    if context.generation % config.generations_per_batch == 0:
        context.best_agent = champion.clone()
        context.batch += 1
    return champion


def run_batch(context: TrainingContext) -> Agent:
    """Finish the current batch; its last champion becomes best_agent.

    Generations already stepped individually count toward the batch.
    """
    if context.finished:
        raise RuntimeError("All training batches have already run.")
    batch = context.batch
    while context.batch == batch:
        evolve_one_generation(context)
    return context.best_agent


def train(config: Optional[TrainingConfig] = None) -> TrainingContext:
    """Run every batch and return the finished context."""
    context = init_population(config)
    config = context.config
    started = time.time()
    print(
        "Training start:",
        {
            "population": config.evolution.population_size,
            "generations_per_batch": config.generations_per_batch,
            "batches": config.total_batches,
            "training_depth": config.evolution.training_depth,
            "seed": config.seed,
        },
        flush=True,
    )
    while not context.finished:
        run_batch(context)
    elapsed = time.time() - started
    print(
        f"Training complete in {elapsed:.1f}s after {context.generation} generations. "
        f"Best agent: {context.best_agent!r}",
        flush=True,
    )
    return context
