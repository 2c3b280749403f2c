"""
Random stream helpers.

Every stochastic operation in the engine receives the same
numpy Generator and draws from it in a fixed order, so a run is fully
determined by its seed. Nothing in the package keeps a generator of its own.
"""

from typing import List, Tuple
import numpy as np


def make_rng(seed: int) -> np.random.Generator:
    """Create the generator that is threaded through a run."""
    return np.random.default_rng(seed)


def next_int(rng: np.random.Generator, lo: int, hi: int) -> int:
    """
    Draw a uniform integer in [lo, hi], both ends inclusive.

    Raises:
        ValueError: If hi < lo
    """
    if hi < lo:
        raise ValueError(f"Empty integer range [{lo}, {hi}]")
    return int(rng.integers(lo, hi + 1))


def next_real(rng: np.random.Generator) -> float:
    """Draw a uniform float in [0, 1)."""
    return float(rng.random())


def next_unique(rng: np.random.Generator, k: int, n: int) -> List[int]:
    """
    Sample k distinct indices from [0, n) without replacement.

    Args:
        rng: Random number generator
        k: Number of indices to draw
        n: Size of the index range

    Returns:
        Indices in the order they were drawn

    Raises:
        ValueError: If k is negative or larger than n
    """
    if k < 0 or k > n:
        raise ValueError(f"Cannot draw {k} unique indices from a range of {n}")
    if k == 0:
        return []
    return [int(i) for i in rng.choice(n, size=k, replace=False)]


def generate_pairs(rng: np.random.Generator, n: int) -> List[Tuple[int, int]]:
    """
    Split [0, n) into disjoint random pairs.

    A random permutation of the range is paired off consecutively. With an
    odd n the last index of the permutation stays unpaired.

    Args:
        rng: Random number generator
        n: Size of the index range

    Returns:
        List of n // 2 index pairs
    """
    order = rng.permutation(n)
    return [(int(order[i]), int(order[i + 1])) for i in range(0, n - 1, 2)]
