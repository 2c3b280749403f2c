"""
Recombination operators.

Each operator takes a pair of equal-length chromosomes and returns two
offspring of that same length.
"""

from typing import Tuple
import numpy as np

from .data_models import Genome, Chromosome
from .random_stream import next_int


def _check_pair(parent_a: Chromosome, parent_b: Chromosome) -> None:
    if len(parent_a) != len(parent_b):
        raise ValueError(
            f"Recombination needs equal-length chromosomes, got {len(parent_a)} and {len(parent_b)}"
        )


def one_point_recombine(
    parent_a: Chromosome,
    parent_b: Chromosome,
    rng: np.random.Generator
) -> Tuple[Chromosome, Chromosome]:
    """
    1-point recombination.

    Both parents are cut at one shared point in [1, L-1] and exchange
    everything after it.

    Args:
        parent_a: First parent
        parent_b: Second parent
        rng: Random number generator

    Returns:
        Tuple of (child_a, child_b)

    Raises:
        ValueError: If the parents differ in length
    """
    _check_pair(parent_a, parent_b)
    if len(parent_a) < 2:
        return parent_a, parent_b

    cut = next_int(rng, 1, len(parent_a) - 1)

    return (
        parent_a[:cut] + parent_b[cut:],
        parent_b[:cut] + parent_a[cut:]
    )


def two_point_recombine(
    parent_a: Chromosome,
    parent_b: Chromosome,
    rng: np.random.Generator
) -> Tuple[Chromosome, Chromosome]:
    """
    2-point recombination.

    Two shared cut points are drawn in [0, L] and the segment between them
    is exchanged. Equal cut points exchange nothing.

    Args:
        parent_a: First parent
        parent_b: Second parent
        rng: Random number generator

    Returns:
        Tuple of (child_a, child_b)

    Raises:
        ValueError: If the parents differ in length
    """
    _check_pair(parent_a, parent_b)

    first = next_int(rng, 0, len(parent_a))
    second = next_int(rng, 0, len(parent_a))
    lo, hi = min(first, second), max(first, second)

    return (
        parent_a[:lo] + parent_b[lo:hi] + parent_a[hi:],
        parent_b[:lo] + parent_a[lo:hi] + parent_b[hi:]
    )


def gene_recombine(
    parent_a: Chromosome,
    parent_b: Chromosome,
    genome: Genome,
    rng: np.random.Generator
) -> Tuple[Chromosome, Chromosome]:
    """
    Gene recombination: swap one randomly chosen whole gene.

    Args:
        parent_a: First parent
        parent_b: Second parent
        genome: Genome describing gene layout
        rng: Random number generator

    Returns:
        Tuple of (child_a, child_b)

    Raises:
        ValueError: If the parents differ in length
    """
    _check_pair(parent_a, parent_b)

    genes_a = genome.split_genes(parent_a)
    genes_b = genome.split_genes(parent_b)

    index = next_int(rng, 0, genome.num_genes - 1)
    genes_a[index], genes_b[index] = genes_b[index], genes_a[index]

    return genome.join_genes(genes_a), genome.join_genes(genes_b)
