"""
Parameter file loading.

Reads a GEP parameter file into Rates, Genome and SimParams records and
validates them. Two formats are understood:

YAML (.yaml / .yml):
    genome:
      terminals: "ab"
      nonterminals: "+-*/"
      gene_connector: "+"
      max_arity: 2
      head_length: 6
      num_genes: 3
    rates:
      mutate: 0.044
      one_point: 0.3
      two_point: 0.3
      gene: 0.1
      is_transpose: 0.1
      ris_transpose: 0.1
      gene_transpose: 0.1
    simulation:
      population_size: 50
      selection_range: 100.0
      max_fitness: 1000.0
      num_generations: 500
      max_is_len: 3
      max_ris_len: 3
      roulette_exponent: 1.0

Flat key=value (any other suffix), one pair per line, whitespace ignored:
    populationSize=50
    rateMutate=0.044
    genomeTerminals=ab
    ...
"""

from pathlib import Path
from typing import Any, Callable, Dict, List, Tuple, Union
import yaml

from .data_models import Genome, Rates, SimParams


class ConfigurationError(Exception):
    """Raised when a parameter file is unreadable or invalid"""
    pass


# Flat-format key -> (section, field, converter)
FLAT_KEYS: Dict[str, Tuple[str, str, Callable[[str], Any]]] = {
    "populationSize":      ("simulation", "pop_size", int),
    "selectionRange":      ("simulation", "selection_range", float),
    "maxFitness":          ("simulation", "max_fitness", float),
    "numGenerations":      ("simulation", "num_generations", int),
    "maxISLen":            ("simulation", "max_is_len", int),
    "maxRISLen":           ("simulation", "max_ris_len", int),
    "rouletteExponent":    ("simulation", "roulette_exponent", float),
    "rateMutate":          ("rates", "mutate", float),
    "rate1R":              ("rates", "one_point", float),
    "rate2R":              ("rates", "two_point", float),
    "rateGR":              ("rates", "gene", float),
    "rateIS":              ("rates", "is_transpose", float),
    "rateRIS":             ("rates", "ris_transpose", float),
    "rateGT":              ("rates", "gene_transpose", float),
    "genomeTerminals":     ("genome", "terminals", str),
    "genomeNonterminals":  ("genome", "nonterminals", str),
    "genomeGeneConnector": ("genome", "gene_connector", lambda s: s[:1]),
    "genomeMaxArity":      ("genome", "max_arity", int),
    "genomeNumGenes":      ("genome", "num_genes", int),
    "genomeHeadLength":    ("genome", "head_length", int),
}

# YAML key -> dataclass field, where they differ
YAML_ALIASES = {
    "population_size": "pop_size",
}

SECTION_TYPES = {
    "genome": Genome,
    "rates": Rates,
    "simulation": SimParams,
}


def check_flat_text(text: str) -> None:
    """
    Structural checks for the flat key=value format.

    Reports the first failure only: empty input, blank lines, a line without
    exactly one '=', or a line too short to hold a key and a value.

    Raises:
        ConfigurationError: On the first failed check
    """
    if not text:
        raise ConfigurationError("Parameter file is empty")

    lines = text.splitlines()
    if "" in lines:
        raise ConfigurationError(f"Blank line in parameter file:\n\n{text}\n")

    for line in lines:
        count = line.count("=")
        if count != 1:
            raise ConfigurationError(
                f"Delimiter count is not 1, it is {count} in line:\n\n{line}\n"
            )

    for line in lines:
        if len(line) <= 2:
            raise ConfigurationError(
                f"Line too short to represent a key value pair:\n\n{line}\n"
            )


def parse_flat_text(text: str) -> Dict[str, Dict[str, Any]]:
    """
    Parse flat key=value text into section dictionaries.

    Spaces and tabs are removed before parsing.

    Returns:
        Dictionary with 'genome', 'rates' and 'simulation' sections

    Raises:
        ConfigurationError: If the text is malformed or a value does not convert
    """
    cleaned = text.replace(" ", "").replace("\t", "").strip("\n")
    check_flat_text(cleaned)

    sections: Dict[str, Dict[str, Any]] = {name: {} for name in SECTION_TYPES}
    for line in cleaned.splitlines():
        key, value = line.split("=", 1)
        if key not in FLAT_KEYS:
            continue
        section, field_name, convert = FLAT_KEYS[key]
        try:
            sections[section][field_name] = convert(value)
        except ValueError:
            raise ConfigurationError(f"Invalid value for '{key}': {value!r}")

    return sections


def _build_section(name: str, values: Dict[str, Any]) -> Any:
    record_type = SECTION_TYPES[name]
    fields = {YAML_ALIASES.get(key, key): value for key, value in values.items()}

    expected = set(record_type.__dataclass_fields__)
    missing = sorted(expected - set(fields))
    if missing:
        raise ConfigurationError(f"Missing keys in '{name}' section: {', '.join(missing)}")

    unknown = sorted(set(fields) - expected)
    if unknown:
        raise ConfigurationError(f"Unknown keys in '{name}' section: {', '.join(unknown)}")

    return record_type(**fields)


def build_params(sections: Dict[str, Dict[str, Any]]) -> Tuple[Rates, Genome, SimParams]:
    """
    Build and validate records from section dictionaries.

    Raises:
        ConfigurationError: If a section is missing or values are invalid
    """
    for name in SECTION_TYPES:
        if not isinstance(sections.get(name), dict):
            raise ConfigurationError(f"Missing required section: '{name}'")

    genome_values = dict(sections["genome"])
    for key in ("terminals", "nonterminals", "gene_connector"):
        if key in genome_values and genome_values[key] is not None:
            genome_values[key] = str(genome_values[key])

    rates = _build_section("rates", sections["rates"])
    genome = _build_section("genome", genome_values)
    params = _build_section("simulation", sections["simulation"])

    errors = validate_params(rates, genome, params)
    if errors:
        raise ConfigurationError("Invalid parameters:\n  " + "\n  ".join(errors))

    return rates, genome, params


def validate_params(rates: Rates, genome: Genome, params: SimParams) -> List[str]:
    """
    Check parameter records against the engine's preconditions.

    Args:
        rates: Operator rates
        genome: Genome
        params: Simulation parameters

    Returns:
        List of error messages (empty if valid)
    """
    errors = []

    for name, value in vars(rates).items():
        if not _is_number(value) or not 0.0 <= value <= 1.0:
            errors.append(f"Rate '{name}' must be in [0, 1], got {value!r}")

    for name in ("terminals", "nonterminals", "gene_connector"):
        if not isinstance(getattr(genome, name), str):
            errors.append(f"Genome field '{name}' must be a string, got {getattr(genome, name)!r}")
    if errors:
        return errors

    if not genome.terminals:
        errors.append("Genome needs at least one terminal symbol")
    if not genome.nonterminals:
        errors.append("Genome needs at least one nonterminal symbol")
    overlap = set(genome.terminals) & set(genome.nonterminals)
    if overlap:
        errors.append(f"Terminal and nonterminal symbols overlap: {''.join(sorted(overlap))}")
    if len(genome.gene_connector) != 1:
        errors.append(f"Gene connector must be one symbol, got {genome.gene_connector!r}")

    # (label, value, minimum) for integer fields
    int_fields = [
        ("max_arity", genome.max_arity, 1),
        ("head_length", genome.head_length, 1),
        ("num_genes", genome.num_genes, 1),
        ("population_size", params.pop_size, 2),
        ("num_generations", params.num_generations, 1),
        ("max_is_len", params.max_is_len, 1),
        ("max_ris_len", params.max_ris_len, 1),
    ]
    for label, value, minimum in int_fields:
        if not _is_int(value):
            errors.append(f"{label} must be an integer, got {value!r}")
        elif value < minimum:
            errors.append(f"{label} must be >= {minimum}, got {value}")

    for label in ("selection_range", "max_fitness"):
        value = getattr(params, label)
        if not _is_number(value):
            errors.append(f"{label} must be a number, got {value!r}")

    if not _is_number(params.roulette_exponent):
        errors.append(f"roulette_exponent must be a number, got {params.roulette_exponent!r}")
    elif params.roulette_exponent <= 0:
        # Weights must fall strictly with rank
        errors.append(f"roulette_exponent must be > 0, got {params.roulette_exponent}")

    return errors


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def load_params(path: Union[str, Path]) -> Tuple[Rates, Genome, SimParams]:
    """
    Load and validate a parameter file.

    Args:
        path: YAML or flat key=value parameter file

    Returns:
        Tuple of (rates, genome, params)

    Raises:
        ConfigurationError: If the file is missing, malformed or invalid
    """
    path = Path(path)

    try:
        with open(path, 'r') as f:
            text = f.read()
    except FileNotFoundError:
        raise ConfigurationError(f"Parameter file not found: {path}")

    if path.suffix.lower() in ('.yaml', '.yml'):
        try:
            sections = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in parameter file: {e}")
        if not isinstance(sections, dict):
            raise ConfigurationError("Parameter file is empty")
    else:
        sections = parse_flat_text(text)

    return build_params(sections)
