"""
Fitness evaluation, filtering and ranking.

These are higher-order helpers that know nothing about what an expressed
individual is. The caller supplies the expression function and the per-case
fitness function; this module sums, filters and sorts the results.
"""

import math
from typing import Any, Callable, List, Optional

from .data_models import (
    Genome, Chromosome, Population, ScoredChromosome, TestCase, TestDict, TestOuts
)


# (chromosome, genome) -> expressed individual
ExpressionFunction = Callable[[Chromosome, Genome], Any]

# (expressed individual, test case, expected output, selection range) -> score
FitnessFunction = Callable[[Any, TestCase, float, float], float]


def fitness_tester(
    expressed: Any,
    fitness_fn: FitnessFunction,
    test_dict: TestDict,
    test_outs: TestOuts,
    selection_range: float
) -> float:
    """
    Aggregate fitness of one expressed individual.

    Args:
        expressed: Expressed individual
        fitness_fn: Per-case fitness function
        test_dict: Test case inputs
        test_outs: Expected outputs, parallel to test_dict
        selection_range: M in the GEP fitness equations

    Returns:
        Sum of the per-case scores
    """
    return sum(
        fitness_fn(expressed, case, expected, selection_range)
        for case, expected in zip(test_dict, test_outs)
    )


def evaluate_population(
    population: Population,
    genome: Genome,
    express_fn: ExpressionFunction,
    fitness_fn: FitnessFunction,
    test_dict: TestDict,
    test_outs: TestOuts,
    selection_range: float
) -> List[float]:
    """Express and score every chromosome, keeping population order."""
    return [
        fitness_tester(express_fn(chromosome, genome), fitness_fn,
                       test_dict, test_outs, selection_range)
        for chromosome in population
    ]


def is_valid_fitness(value: float) -> bool:
    """True unless value is NaN or +/- infinity."""
    return not (math.isnan(value) or math.isinf(value))


def fitness_filter(fitnesses: List[float], population: Population) -> List[ScoredChromosome]:
    """
    Pair fitness values with chromosomes, dropping impossible fitnesses.

    Args:
        fitnesses: Fitness values
        population: Chromosomes, parallel to fitnesses

    Returns:
        (fitness, chromosome) pairs whose fitness is finite, in input order
    """
    return [
        (fitness, chromosome)
        for fitness, chromosome in zip(fitnesses, population)
        if is_valid_fitness(fitness)
    ]


def sort_by_fitness(pairs: List[ScoredChromosome]) -> List[ScoredChromosome]:
    """
    Rank pairs from best to worst.

    A stable ascending sort reversed as a whole, so pairs with equal fitness
    come out in the reverse of their input order.
    """
    return list(reversed(sorted(pairs, key=lambda pair: pair[0])))


def get_best(pairs: List[ScoredChromosome]) -> Optional[ScoredChromosome]:
    """
    Pair with the highest fitness.

    Returns:
        The first pair holding the maximum fitness, or None if pairs is empty
    """
    if not pairs:
        return None
    return max(pairs, key=lambda pair: pair[0])


def mean_fitness(pairs: List[ScoredChromosome]) -> float:
    """Average fitness of the pairs, NaN for an empty list."""
    if not pairs:
        return math.nan
    return sum(fitness for fitness, _ in pairs) / len(pairs)
