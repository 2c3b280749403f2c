"""
Gene Expression Programming engine

This package evolves linear-encoded symbolic expressions (chromosomes)
against a set of fitness test cases.

Key Features:
- Reproducible runs (one numpy Generator threaded through every operator)
- Mutation, IS/RIS/gene transposition, 1-point/2-point/gene recombination
- NaN/infinite fitness filtering with elitism and gap refill
- Rank-based roulette selection

Modules:
- data_models: Genome, Rates, SimParams, RunResult
- random_stream: Random draws used by every stochastic operation
- mutation: Point mutation and random chromosome generation
- transposition: IS, RIS and gene transposition
- crossover: 1-point, 2-point and gene recombination
- fitness: Fitness aggregation, filtering and ranking
- selection: Roulette weights and sampling
- evolution: Generation step and evolution loop
- config_loader: Parameter file loading and validation
- io_utils: Fitness case CSV loading, history and summary export
- orchestration: Symbolic regression run workflow
- cli: Run configuration loading and dispatching
"""

__version__ = "0.1.0"

from .data_models import Genome, Rates, SimParams, RunResult
from .evolution import generation_step, evolution_loop

__all__ = [
    "Genome",
    "Rates",
    "SimParams",
    "RunResult",
    "generation_step",
    "evolution_loop",
]
