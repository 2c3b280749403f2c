"""
Visualization utilities for GEP runs.

Plots the best fitness per generation of a completed run.
"""

from pathlib import Path
from typing import List, Optional, Tuple, Union

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt


def plot_fitness_history(
    history: List[float],
    output_path: Union[str, Path],
    max_fitness: Optional[float] = None,
    figsize: Tuple[int, int] = (10, 6)
) -> Path:
    """
    Plot best fitness against generation and save it as an image.

    Args:
        history: Best fitness after each generation
        output_path: Path to save the image (format follows the suffix)
        max_fitness: Convergence target, drawn as a dashed line if given
        figsize: Figure size (width, height) in inches

    Returns:
        Path to the saved image
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    fig, ax = plt.subplots(figsize=figsize)
    ax.plot(range(len(history)), history, color='tab:blue', label='best fitness')

    if max_fitness is not None:
        ax.axhline(max_fitness, color='tab:red', linestyle='--', label='max fitness')

    ax.set_xlabel('Generation')
    ax.set_ylabel('Fitness')
    ax.set_title('Best fitness per generation')
    ax.grid(True, alpha=0.3)
    ax.legend(loc='lower right')

    fig.tight_layout()
    fig.savefig(output_path, dpi=150, bbox_inches='tight')
    plt.close(fig)

    print(f"  Saved fitness plot: {output_path}")
    return output_path
