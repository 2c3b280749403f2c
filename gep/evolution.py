"""
Generation step and evolution loop.

One generation is: express and score, filter impossible fitnesses, keep the
elite, refill the breeding pool, roulette-select, then run the operator
pipeline. The order of these stages fixes the sequence of random draws and
is part of the contract: the same seed, configuration and initial
population always reproduce the same run.
"""

import math
from typing import Callable, List, Optional, Sequence, Tuple
import numpy as np

from .data_models import (
    Genome, Rates, SimParams, Chromosome, Population, ScoredChromosome, TestDict, TestOuts
)
from .random_stream import next_unique, generate_pairs
from .fitness import (
    ExpressionFunction,
    FitnessFunction,
    evaluate_population,
    fitness_filter,
    get_best,
    sort_by_fitness,
)
from .selection import roulette_weights, roulette, select
from .mutation import mutate, new_individual, new_population
from .transposition import is_transpose, ris_transpose, gene_transpose
from .crossover import one_point_recombine, two_point_recombine, gene_recombine


# (generation index, best fitness, new population) -> None
GenerationCallback = Callable[[int, float, Population], None]


def put_together(
    indices: Sequence[int],
    replacements: Sequence[Chromosome],
    original: Sequence[Chromosome]
) -> Population:
    """
    Splice replacements back into a population by index.

    Positions listed in indices take the matching replacement; every other
    position keeps its original chromosome.

    Args:
        indices: Strictly ascending positions to replace
        replacements: New chromosomes, parallel to indices
        original: Population before replacement

    Returns:
        New population, same length as original

    Raises:
        ValueError: If indices and replacements differ in length
        IndexError: If indices are out of range, repeated or not ascending
    """
    if len(indices) != len(replacements):
        raise ValueError(
            f"Got {len(indices)} indices but {len(replacements)} replacements"
        )

    result = []
    cursor = 0
    for position, chromosome in enumerate(original):
        if cursor < len(indices) and indices[cursor] == position:
            result.append(replacements[cursor])
            cursor += 1
        else:
            result.append(chromosome)

    if cursor != len(indices):
        raise IndexError(
            f"Splice indices {list(indices)} are not ascending positions in [0, {len(original)})"
        )

    return result


def _operator_count(pool_size: int, rate: float) -> int:
    return int(math.floor(pool_size * rate))


def _transpose_subset(
    population: Population,
    count: int,
    operator: Callable[[Chromosome], Chromosome],
    rng: np.random.Generator
) -> Population:
    chosen = next_unique(rng, count, len(population))
    transposed = [operator(population[i]) for i in chosen]

    order = sorted(range(len(chosen)), key=lambda j: chosen[j])
    return put_together(
        [chosen[j] for j in order],
        [transposed[j] for j in order],
        population
    )


def _recombine_pairs(
    population: Population,
    count: int,
    operator: Callable[[Chromosome, Chromosome], Tuple[Chromosome, Chromosome]],
    rng: np.random.Generator
) -> Population:
    pairs = generate_pairs(rng, len(population))[:count]

    chosen = []
    offspring = []
    for a, b in pairs:
        child_a, child_b = operator(population[a], population[b])
        chosen.extend([a, b])
        offspring.extend([child_a, child_b])

    order = sorted(range(len(chosen)), key=lambda j: chosen[j])
    return put_together(
        [chosen[j] for j in order],
        [offspring[j] for j in order],
        population
    )


def apply_operators(
    selected: Population,
    genome: Genome,
    params: SimParams,
    rates: Rates,
    rng: np.random.Generator
) -> Population:
    """
    Run the genetic operator pipeline over the breeding pool.

    Stages, in order: mutation of every chromosome, IS, RIS and gene
    transposition on independently sampled subsets, then 1-point, 2-point
    and gene recombination on independently drawn disjoint pairs. Every
    stage samples from the whole pool and works on the output of the
    previous stage; chromosomes it does not touch pass through unchanged.

    Args:
        selected: Breeding pool
        genome: Genome describing gene layout
        params: Simulation parameters (transposon lengths)
        rates: Operator rates
        rng: Random number generator

    Returns:
        New breeding pool of the same size
    """
    n = len(selected)

    population = [mutate(c, genome, rates.mutate, rng) for c in selected]

    population = _transpose_subset(
        population, _operator_count(n, rates.is_transpose),
        lambda c: is_transpose(c, genome, params.max_is_len, rng), rng
    )
    population = _transpose_subset(
        population, _operator_count(n, rates.ris_transpose),
        lambda c: ris_transpose(c, genome, params.max_ris_len, rng), rng
    )
    population = _transpose_subset(
        population, _operator_count(n, rates.gene_transpose),
        lambda c: gene_transpose(c, genome, rng), rng
    )

    population = _recombine_pairs(
        population, _operator_count(n, rates.one_point),
        lambda a, b: one_point_recombine(a, b, rng), rng
    )
    population = _recombine_pairs(
        population, _operator_count(n, rates.two_point),
        lambda a, b: two_point_recombine(a, b, rng), rng
    )
    population = _recombine_pairs(
        population, _operator_count(n, rates.gene),
        lambda a, b: gene_recombine(a, b, genome, rng), rng
    )

    return population


def fill_filter_gap(
    pairs: List[ScoredChromosome],
    target_size: int,
    genome: Genome,
    rng: np.random.Generator
) -> List[ScoredChromosome]:
    """
    Top up a filtered population with fresh random chromosomes.

    Newcomers get fitness 0.0 and are appended after the survivors.

    Args:
        pairs: Filtered (fitness, chromosome) pairs
        target_size: Size the pool must reach
        genome: Genome for random generation
        rng: Random number generator

    Returns:
        Pool of at least target_size pairs
    """
    missing = target_size - len(pairs)
    if missing <= 0:
        return list(pairs)
    return list(pairs) + [(0.0, c) for c in new_population(genome, missing, rng)]


def generation_step(
    population: Population,
    genome: Genome,
    params: SimParams,
    rates: Rates,
    express_fn: ExpressionFunction,
    fitness_fn: FitnessFunction,
    test_dict: TestDict,
    test_outs: TestOuts,
    rng: np.random.Generator
) -> Tuple[float, Population]:
    """
    Produce the next generation.

    Algorithm:
        1. Express and score every chromosome against all test cases
        2. Drop NaN/infinite fitnesses
        3. Keep the best survivor; if none survived, a fresh random
           chromosome with fitness 0.0 takes its place
        4. Refill the breeding pool to N-1 with fresh random chromosomes
        5. Rank the pool and roulette-select N-1 chromosomes
        6. Run the operator pipeline on the selection
        7. Prepend the elite chromosome

    The returned fitness always belongs to the chromosome at the front of
    the returned population.

    Args:
        population: Current population (at least 2 chromosomes)
        genome: Genome
        params: Simulation parameters
        rates: Operator rates
        express_fn: Expression function
        fitness_fn: Per-case fitness function
        test_dict: Test case inputs
        test_outs: Expected outputs
        rng: Random number generator

    Returns:
        Tuple of (best_fitness, new_population) with len(new_population) == len(population)

    Raises:
        ValueError: If the population holds fewer than 2 chromosomes
    """
    if len(population) < 2:
        raise ValueError(f"Population needs at least 2 chromosomes, got {len(population)}")

    n_select = len(population) - 1

    fitnesses = evaluate_population(
        population, genome, express_fn, fitness_fn,
        test_dict, test_outs, params.selection_range
    )
    filtered = fitness_filter(fitnesses, population)

    best = get_best(filtered)
    if best is None:
        best = (0.0, new_individual(genome, rng))
    best_fitness, best_chromosome = best

    pool = sort_by_fitness(fill_filter_gap(filtered, n_select, genome, rng))

    weights = roulette_weights(len(pool), params.roulette_exponent)
    selected = select(pool, roulette(rng, weights, n_select))

    bred = apply_operators(selected, genome, params, rates, rng)

    return best_fitness, [best_chromosome] + bred


def evolution_loop(
    initial_population: Population,
    genome: Genome,
    params: SimParams,
    rates: Rates,
    express_fn: ExpressionFunction,
    fitness_fn: FitnessFunction,
    test_dict: TestDict,
    test_outs: TestOuts,
    max_generations: int,
    target_fitness: float,
    rng: np.random.Generator,
    on_generation: Optional[GenerationCallback] = None
) -> Tuple[float, Population]:
    """
    Repeat generation_step until the budget runs out or the target is hit.

    The target comparison is exact: a step whose best fitness equals
    target_fitness ends the run, anything else keeps it going.

    Args:
        initial_population: Starting population
        genome: Genome
        params: Simulation parameters
        rates: Operator rates
        express_fn: Expression function
        fitness_fn: Per-case fitness function
        test_dict: Test case inputs
        test_outs: Expected outputs
        max_generations: Maximum number of steps (at least 1)
        target_fitness: Fitness that ends the run early
        rng: Random number generator
        on_generation: Optional callback run after every step

    Returns:
        Tuple of (best_fitness, final_population); final_population[0] is
        the chromosome best_fitness was measured on

    Raises:
        ValueError: If max_generations < 1
    """
    if max_generations < 1:
        raise ValueError(f"max_generations must be at least 1, got {max_generations}")

    population = list(initial_population)
    best_fitness = math.nan

    for generation in range(max_generations):
        best_fitness, population = generation_step(
            population, genome, params, rates,
            express_fn, fitness_fn, test_dict, test_outs, rng
        )

        if on_generation is not None:
            on_generation(generation, best_fitness, population)

        if best_fitness == target_fitness:
            break

    return best_fitness, population
