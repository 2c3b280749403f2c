"""
Rank-based roulette selection.
"""

from typing import List, Sequence
import numpy as np

from .data_models import Chromosome, ScoredChromosome
from .random_stream import next_real


def roulette_weights(n: int, exponent: float) -> np.ndarray:
    """
    Selection weights for a ranked pool of n individuals.

    Rank 0 (the best) gets n ** exponent, rank r gets (n - r) ** exponent,
    so weights strictly decrease with rank for any positive exponent. The
    weights are not normalized.

    Args:
        n: Pool size
        exponent: Roulette exponent

    Returns:
        Array of n weights
    """
    return np.arange(n, 0, -1, dtype=float) ** exponent


def roulette(rng: np.random.Generator, weights: Sequence[float], k: int) -> List[int]:
    """
    Draw k indices with replacement, proportionally to weights.

    Each draw consumes exactly one uniform real, which is scaled to the total
    weight and located in the cumulative weights.

    Args:
        rng: Random number generator
        weights: Non-negative weights, at least one positive
        k: Number of draws

    Returns:
        List of k indices into weights

    Raises:
        ValueError: If weights are empty or sum to zero
    """
    cumulative = np.cumsum(np.asarray(weights, dtype=float))
    if len(cumulative) == 0 or cumulative[-1] <= 0:
        raise ValueError("Roulette needs at least one positive weight")

    total = cumulative[-1]
    indices = []
    for _ in range(k):
        target = next_real(rng) * total
        index = int(np.searchsorted(cumulative, target, side='right'))
        indices.append(min(index, len(cumulative) - 1))

    return indices


def select(pool: List[ScoredChromosome], indices: List[int]) -> List[Chromosome]:
    """Chromosomes of pool at the given indices, in index order."""
    return [pool[i][1] for i in indices]
