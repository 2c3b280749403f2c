"""
I/O utilities for GEP runs.

Handles fitness case CSV parsing, fitness history logging and run summary
export.
"""

import csv
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union
from datetime import datetime
import yaml

from .data_models import Genome, RunResult, TestDict, TestOuts


def load_fitness_cases(
    csv_path: Union[str, Path],
    genome: Genome,
    output_column: str = 'y'
) -> Tuple[TestDict, TestOuts]:
    """
    Load fitness test cases from a CSV file.

    CSV format (one column per terminal, plus the expected output):
        a,b,y
        1.0,2.0,3.0
        2.0,5.0,7.0
        ...

    Args:
        csv_path: Path to CSV file
        genome: Genome whose terminals name the input columns
        output_column: Column holding the expected output

    Returns:
        Tuple of (test_dict, test_outs)

    Raises:
        FileNotFoundError: If CSV file doesn't exist
        ValueError: If CSV format is invalid
    """
    csv_path = Path(csv_path)

    if not csv_path.exists():
        raise FileNotFoundError(f"Fitness case file not found: {csv_path}")

    test_dict = []
    test_outs = []
    with open(csv_path, 'r', newline='') as f:
        reader = csv.DictReader(f)
        if reader.fieldnames is not None:
            reader.fieldnames = [name.strip() for name in reader.fieldnames]

        if reader.fieldnames is None or output_column not in reader.fieldnames:
            raise ValueError(
                f"Invalid fitness case file {csv_path}. Expected an output column '{output_column}'"
            )

        inputs = [name for name in reader.fieldnames if name != output_column]
        unknown = [name for name in inputs if name not in genome.terminals or len(name) != 1]
        if unknown:
            raise ValueError(
                f"Columns {unknown} in {csv_path} are not terminal symbols of the genome"
            )
        # Digit terminals are constants and need no column
        missing = [t for t in genome.terminals if not t.isdigit() and t not in inputs]
        if missing:
            raise ValueError(
                f"Terminals {missing} have no column in {csv_path}"
            )

        for line_number, row in enumerate(reader, start=2):
            try:
                case = {name: float(row[name]) for name in inputs}
                expected = float(row[output_column])
            except (KeyError, TypeError, ValueError):
                raise ValueError(f"Non-numeric value on line {line_number} of {csv_path}")
            test_dict.append(case)
            test_outs.append(expected)

    if not test_dict:
        raise ValueError(f"No fitness cases found in {csv_path}")

    return test_dict, test_outs


def save_fitness_history(
    history: List[float],
    output_path: Union[str, Path],
    overwrite: bool = False
) -> Path:
    """
    Save per-generation best fitness to a CSV file.

    Args:
        history: Best fitness after each generation
        output_path: Path for output CSV
        overwrite: If True, overwrite existing file

    Returns:
        Path to saved CSV file

    Raises:
        FileExistsError: If file exists and overwrite=False
    """
    output_path = Path(output_path)

    if output_path.exists() and not overwrite:
        raise FileExistsError(f"Output file already exists: {output_path}")

    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', newline='') as f:
        writer = csv.writer(f)
        writer.writerow(['generation', 'best_fitness'])
        for generation, fitness in enumerate(history):
            writer.writerow([generation, fitness])

    return output_path


def save_run_summary(
    result: RunResult,
    output_path: Union[str, Path],
    overwrite: bool = False,
    extra: Optional[Dict[str, Any]] = None
) -> Path:
    """
    Save a run summary as YAML.

    Args:
        result: Run result to save
        output_path: Path for output YAML
        overwrite: If True, overwrite existing file
        extra: Additional top-level entries (e.g. infix form of the best chromosome)

    Returns:
        Path to saved YAML file

    Raises:
        FileExistsError: If file exists and overwrite=False
    """
    output_path = Path(output_path)

    if output_path.exists() and not overwrite:
        raise FileExistsError(f"Output file already exists: {output_path}")

    output_path.parent.mkdir(parents=True, exist_ok=True)

    summary = result.to_dict()
    summary['saved_at'] = datetime.now().isoformat()
    if extra:
        summary.update(extra)

    with open(output_path, 'w') as f:
        yaml.safe_dump(summary, f, sort_keys=False)

    return output_path


def load_run_summary(summary_path: Union[str, Path]) -> RunResult:
    """
    Load a run summary written by save_run_summary.

    Raises:
        FileNotFoundError: If the summary file doesn't exist
    """
    summary_path = Path(summary_path)

    if not summary_path.exists():
        raise FileNotFoundError(f"Run summary not found: {summary_path}")

    with open(summary_path, 'r') as f:
        data = yaml.safe_load(f)

    return RunResult(
        best_fitness=float(data['best_fitness']),
        best_chromosome=data['best_chromosome'],
        generations=int(data['generations']),
        history=[float(x) for x in data.get('history', [])],
        converged=bool(data.get('converged', False)),
        seed=data.get('seed'),
        metadata=data.get('metadata') or {},
    )
