"""
CLI module for GEP runs.

Handles run configuration loading, validation, and dispatching.

Run configuration format:
    params: examples/params.yaml          # GEP parameter file (YAML or key=value)
    fitness_cases: examples/cases.csv     # CSV of terminal columns plus 'y'
    random_seed: 42                       # optional
    fitness: absolute                     # 'absolute' or 'relative'
    report_every: 10                      # optional progress interval
    num_generations: 200                  # optional override of the parameter file
    output:
      root: gep_output/run_001
      overwrite: false
      dot: true                           # write best.dot
      plot: true                          # write fitness_history.png
"""

from typing import Dict, Any
from pathlib import Path
import yaml


class ConfigValidationError(Exception):
    """Raised when run configuration is invalid."""
    pass


FITNESS_CHOICES = ['absolute', 'relative']


def load_run_config(config_path: str) -> Dict[str, Any]:
    """
    Load run configuration from YAML file.

    Args:
        config_path: Path to run configuration YAML file

    Returns:
        Dictionary containing run configuration

    Raises:
        FileNotFoundError: If config file doesn't exist
        ConfigValidationError: If config is invalid
    """
    config_file = Path(config_path)

    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with open(config_file, 'r') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigValidationError(f"Invalid YAML in configuration file: {e}")

    if config is None:
        raise ConfigValidationError("Configuration file is empty")

    if not isinstance(config, dict):
        raise ConfigValidationError("Configuration file must contain a mapping")

    return config


def validate_run_config(config: Dict[str, Any]) -> None:
    """
    Validate run configuration structure.

    Args:
        config: Run configuration dictionary

    Raises:
        ConfigValidationError: If configuration is invalid
    """
    required = ['params', 'fitness_cases', 'output']
    for field in required:
        if field not in config:
            raise ConfigValidationError(f"Missing required field: '{field}'")

    for field in ['params', 'fitness_cases']:
        path = Path(config[field])
        if not path.exists():
            raise ConfigValidationError(f"File not found for '{field}': {path}")

    if not isinstance(config['output'], dict):
        raise ConfigValidationError("'output' must be a dictionary")

    if 'root' not in config['output']:
        raise ConfigValidationError("Missing required field: 'output.root'")

    fitness = config.get('fitness', 'absolute')
    if fitness not in FITNESS_CHOICES:
        raise ConfigValidationError(
            f"Invalid fitness: '{fitness}'. Must be one of {FITNESS_CHOICES}"
        )

    seed = config.get('random_seed')
    if seed is not None and (not isinstance(seed, int) or isinstance(seed, bool) or seed < 0):
        raise ConfigValidationError(
            f"'random_seed' must be a non-negative integer, got: {seed}"
        )

    for field in ['report_every', 'num_generations']:
        if field in config:
            value = config[field]
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                raise ConfigValidationError(
                    f"'{field}' must be a positive integer, got: {value}"
                )


def run_from_config(config_path: str) -> None:
    """
    Load, validate and execute a run configuration.

    Args:
        config_path: Path to run configuration YAML file
    """
    config = load_run_config(config_path)
    validate_run_config(config)

    from .orchestration import run_regression
    run_regression(config)
