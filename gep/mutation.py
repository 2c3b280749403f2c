"""
Mutation and random chromosome generation.

Head positions may hold any symbol of the alphabet, tail positions only
terminals. Both the point mutation and the random generators keep that
invariant.
"""

from typing import List
import numpy as np

from .data_models import Genome, Chromosome, Population
from .random_stream import next_int, next_real


def _random_symbol(alphabet: str, rng: np.random.Generator) -> str:
    return alphabet[next_int(rng, 0, len(alphabet) - 1)]


def new_gene(genome: Genome, rng: np.random.Generator) -> str:
    """
    Generate one random gene.

    Args:
        genome: Genome describing head/tail layout and alphabet
        rng: Random number generator

    Returns:
        Gene of genome.gene_length symbols
    """
    head = [_random_symbol(genome.all_symbols, rng) for _ in range(genome.head_length)]
    tail = [_random_symbol(genome.terminals, rng) for _ in range(genome.tail_length)]
    return "".join(head + tail)


def new_individual(genome: Genome, rng: np.random.Generator) -> Chromosome:
    """Generate one random chromosome of genome.num_genes genes."""
    return genome.join_genes([new_gene(genome, rng) for _ in range(genome.num_genes)])


def new_population(genome: Genome, size: int, rng: np.random.Generator) -> Population:
    """Generate a list of size random chromosomes."""
    return [new_individual(genome, rng) for _ in range(size)]


def mutate(
    chromosome: Chromosome,
    genome: Genome,
    p_mutate: float,
    rng: np.random.Generator
) -> Chromosome:
    """
    Point-mutate a chromosome.

    Each position is visited in order and replaced with probability
    p_mutate. A head position draws its replacement from the full alphabet,
    a tail position from the terminals only.

    Args:
        chromosome: Chromosome to mutate
        genome: Genome describing head/tail layout
        p_mutate: Per-position mutation probability
        rng: Random number generator

    Returns:
        Mutated chromosome of the same length
    """
    symbols: List[str] = list(chromosome)

    for position in range(len(symbols)):
        if next_real(rng) >= p_mutate:
            continue
        if genome.is_head_position(position):
            symbols[position] = _random_symbol(genome.all_symbols, rng)
        else:
            symbols[position] = _random_symbol(genome.terminals, rng)

    return "".join(symbols)
