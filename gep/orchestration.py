"""
Orchestration of a symbolic regression run.

Loads parameters and fitness cases, runs the evolution loop and writes the
run outputs. All printing and file access happens here, around the loop.
"""

from typing import Dict, List
from pathlib import Path
import numpy as np

from .data_models import RunResult, Population
from .config_loader import load_params
from .io_utils import load_fitness_cases, save_fitness_history, save_run_summary
from .mutation import new_population
from .evolution import evolution_loop
from .visualization_utils import plot_fitness_history


def run_regression(run_config: Dict) -> RunResult:
    """
    Evolve an arithmetic expression that fits a set of fitness cases.

    Args:
        run_config: Run configuration dict from YAML

    Algorithm:
        1. Load parameters (run_config['params']) and fitness cases
           (run_config['fitness_cases'])
        2. Setup RNG (run_config['random_seed'], random if absent)
        3. Generate the initial population
        4. Run the evolution loop, printing progress every report_every generations
        5. Express the best chromosome and print its infix form
        6. Write fitness history, summary, and optional dot file and plot
           under run_config['output']['root']

    Returns:
        RunResult describing the outcome
    """
    from regression import (
        FITNESS_FUNCTIONS, check_genome, express_individual, infix, dump_dot_file
    )

    print("=" * 70)
    print("SYMBOLIC REGRESSION")
    print("=" * 70)

    params_path = run_config['params']
    print(f"Loading parameters from: {params_path}")
    rates, genome, params = load_params(params_path)
    check_genome(genome)

    cases_path = run_config['fitness_cases']
    print(f"Loading fitness cases from: {cases_path}")
    test_dict, test_outs = load_fitness_cases(
        cases_path, genome, run_config.get('output_column', 'y')
    )
    print(f"Fitness cases: {len(test_dict)}")

    fitness_name = run_config.get('fitness', 'absolute')
    fitness_fn = FITNESS_FUNCTIONS[fitness_name]
    print(f"Fitness function: {fitness_name}")

    seed = run_config.get('random_seed')
    if seed is None:
        seed = int(np.random.randint(0, 2**31))
    print(f"Random seed: {seed}")
    rng = np.random.default_rng(seed)

    output_root = Path(run_config['output']['root'])
    overwrite = run_config['output'].get('overwrite', False)

    if output_root.exists() and not overwrite:
        raise FileExistsError(
            f"Output directory already exists: {output_root}\n"
            f"Set 'output.overwrite: true' in config to overwrite"
        )

    output_root.mkdir(parents=True, exist_ok=overwrite)
    print(f"Output directory: {output_root}\n")

    population = new_population(genome, params.pop_size, rng)

    num_generations = run_config.get('num_generations', params.num_generations)
    report_every = max(1, int(run_config.get('report_every', 10)))
    history: List[float] = []

    def report(generation: int, best_fitness: float, pop: Population) -> None:
        history.append(best_fitness)
        if (generation + 1) % report_every == 0 or best_fitness == params.max_fitness:
            print(f"  Generation {generation + 1}/{num_generations}: best fitness {best_fitness:.6g}")

    print(f"Evolving {params.pop_size} chromosomes for up to {num_generations} generations...")
    print()

    best_fitness, population = evolution_loop(
        population, genome, params, rates,
        express_individual, fitness_fn, test_dict, test_outs,
        num_generations, params.max_fitness, rng,
        on_generation=report
    )

    best_chromosome = population[0]
    best_expression = express_individual(best_chromosome, genome)
    best_infix = infix(best_expression)

    result = RunResult(
        best_fitness=best_fitness,
        best_chromosome=best_chromosome,
        generations=len(history),
        history=history,
        converged=best_fitness == params.max_fitness,
        seed=seed
    )

    history_path = save_fitness_history(history, output_root / 'fitness_history.csv', overwrite)
    result.metadata['fitness_history'] = str(history_path)

    if run_config['output'].get('dot', False):
        dot_path = dump_dot_file(output_root / 'best.dot', best_expression)
        result.metadata['dot_file'] = str(dot_path)

    if run_config['output'].get('plot', False):
        plot_path = plot_fitness_history(
            history, output_root / 'fitness_history.png', params.max_fitness
        )
        result.metadata['plot'] = str(plot_path)

    summary_path = save_run_summary(
        result, output_root / 'summary.yaml', overwrite,
        extra={'infix': best_infix, 'fitness_function': fitness_name}
    )

    print()
    print("=" * 70)
    print("SUMMARY")
    print("=" * 70)
    print(f"DONE  : {best_fitness}")
    print(f"INFIX : {best_infix}")
    print(f"Generations: {result.generations}")
    print(f"Converged: {result.converged}")
    print(f"Summary: {summary_path}")

    return result
