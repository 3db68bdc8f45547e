"""
Population management for the genome evolution.

Handles the lifecycle of a fixed-size population of agents:
- Initialization (uniform random genomes)
- Evaluation (self-play fitness against random members)
- Reproduction (elitism, uniform crossover, mutation)

All randomness comes from the `random.Random` handed to the population, so a
seeded generator reproduces every pairing, crossover and mutation.
"""
from __future__ import annotations

import random
from dataclasses import dataclass
from typing import List, Optional

from .agent import GENOME_SIZE, Agent, Genome
from .selfplay import training_match


@dataclass
class EvolutionConfig:
    """Configuration for the evolutionary loop."""

    # Population
    population_size: int = 50
    elite_count: int = 10

    # Fitness evaluation
    matches_per_agent: int = 3
    training_depth: int = 4
    max_plies: int = 30
    win_reward: float = 20.0

    # Reproduction
    parent_pool_divisor: int = 3  # parents come from the top 1/divisor
    mutation_rate: float = 0.2
    mutation_step: float = 2.5

    @property
    def parent_pool(self) -> int:
        return self.population_size // self.parent_pool_divisor

    def validate(self) -> "EvolutionConfig":
        if self.population_size <= 0:
            raise ValueError("population_size must be > 0")
        if not 0 <= self.elite_count <= self.population_size:
            raise ValueError("elite_count must be within [0, population_size]")
        if self.matches_per_agent < 0:
            raise ValueError("matches_per_agent must be >= 0")
        if self.training_depth < 0:
            raise ValueError("training_depth must be >= 0")
        if self.max_plies <= 0:
            raise ValueError("max_plies must be > 0")
        if self.parent_pool_divisor <= 0 or self.parent_pool < 1:
            raise ValueError("parent pool must contain at least one agent")
        if not 0.0 <= self.mutation_rate <= 1.0:
            raise ValueError("mutation_rate must be within [0, 1]")
        if self.mutation_step < 0:
            raise ValueError("mutation_step must be >= 0")
        return self


@dataclass
class GenerationStats:
    """Statistics for an evaluated generation."""

    generation: int = 0
    best_fitness: float = 0.0
    avg_fitness: float = 0.0
    min_fitness: float = 0.0
    wins: int = 0
    losses: int = 0
    draws: int = 0


class Population:
    """
    Fixed-size population of genome agents.

    One generation is evaluate -> sort -> reproduce:

        pop = Population(EvolutionConfig(), rng=random.Random(7))
        pop.initialize()
        champion = pop.evolve_one_generation()

    The population owns its agents; champion and runner-up are handed out
    as clones so later turnover cannot change them.
    """

    def __init__(
        self,
        config: Optional[EvolutionConfig] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.config = (config or EvolutionConfig()).validate()
        self.rng = rng if rng is not None else random.Random()
        self.agents: List[Agent] = []
        self.generation = 0
        self.champion: Optional[Agent] = None
        self.runner_up: Optional[Agent] = None
        self.last_stats: Optional[GenerationStats] = None

    def __len__(self) -> int:
        return len(self.agents)

    def initialize(self) -> None:
        self.agents = [Agent.random(self.rng) for _ in range(self.config.population_size)]
        self.generation = 0
        self.champion = None
        self.runner_up = None
        self.last_stats = None

    def _require_agents(self) -> None:
        if len(self.agents) != self.config.population_size:
            raise RuntimeError("Population is not initialized; call initialize() first.")

    # --- evaluation ---
    def evaluate_generation(self) -> GenerationStats:
        """Play every agent's matches, then sort by descending fitness."""
        self._require_agents()
        size = len(self.agents)
        stats = GenerationStats(generation=self.generation)
        for agent in self.agents:
            agent.fitness = 0.0
            for _ in range(self.config.matches_per_agent):
                # The opponent may be the agent itself.
                opponent = self.agents[self.rng.randrange(size)]
                delta = training_match(agent, opponent, self.config)
                agent.fitness += delta
                if delta > 0:
                    stats.wins += 1
                elif delta < 0:
                    stats.losses += 1
                else:
                    stats.draws += 1

        # list.sort is stable: ties keep evaluation order.
        self.agents.sort(key=lambda a: a.fitness, reverse=True)
        fitnesses = [a.fitness for a in self.agents]
        stats.best_fitness = fitnesses[0]
        stats.min_fitness = fitnesses[-1]
        stats.avg_fitness = sum(fitnesses) / len(fitnesses)
        self.last_stats = stats
        return stats

    # --- reproduction ---
    def crossover_gene(self, parent_a: Agent, parent_b: Agent, index: int) -> float:
        """Uniform crossover: the gene comes from either parent with equal odds."""
        return parent_a.genome[index] if self.rng.random() < 0.5 else parent_b.genome[index]

    def mutate_gene(self, gene: float) -> float:
        if self.rng.random() < self.config.mutation_rate:
            step = self.config.mutation_step
            gene += self.rng.uniform(-step, step)
        return gene

    def make_child(self, parent_a: Agent, parent_b: Agent) -> Agent:
        # Crossover and mutation draws interleave gene by gene.
        genes: Genome = tuple(  # type: ignore[assignment]
            self.mutate_gene(self.crossover_gene(parent_a, parent_b, g))
            for g in range(GENOME_SIZE)
        )
        return Agent(genes)

    def reproduce(self) -> None:
        """Replace the sorted population with elites plus offspring."""
        self._require_agents()
        size = self.config.population_size
        pool = self.config.parent_pool
        next_generation: List[Agent] = list(self.agents[: self.config.elite_count])
        while len(next_generation) < size:
            parent_a = self.agents[self.rng.randrange(pool)]
            parent_b = self.agents[self.rng.randrange(pool)]
            next_generation.append(self.make_child(parent_a, parent_b))
        self.agents = next_generation

    def evolve_one_generation(self) -> Agent:
        """Evaluate, reproduce and return a clone of this generation's champion."""
        self.evaluate_generation()
        self.champion = self.agents[0].clone()
        self.runner_up = self.agents[1].clone() if len(self.agents) > 1 else self.champion.clone()
        self.reproduce()
        self.generation += 1
        return self.champion
