"""
Data models for the GEP engine.

Core value types: the genome that interprets a chromosome, operator rates,
simulation parameters, and the record returned by a complete run.
Chromosomes themselves are plain strings of one-character symbols.
"""

from dataclasses import dataclass, field
from typing import Optional, Any, List, Dict, Tuple


Symbol = str
Chromosome = str
Population = List[Chromosome]
ScoredChromosome = Tuple[float, Chromosome]
TestCase = Dict[Symbol, Any]
TestDict = List[TestCase]
TestOuts = List[float]


@dataclass(frozen=True)
class Genome:
    """
    Everything needed to interpret a chromosome.

    The alphabet is split between terminal and nonterminal symbols. Genes
    are laid out back to back with no boundary markers; boundaries follow
    from gene_length.

    Attributes:
        terminals: Terminal symbols (leaf values)
        nonterminals: Nonterminal symbols (functions)
        gene_connector: Symbol linking the expressed genes together
        max_arity: Highest arity of any nonterminal
        head_length: Length of the head of each gene
        num_genes: Number of genes per chromosome
    """
    terminals: str
    nonterminals: str
    gene_connector: Symbol
    max_arity: int
    head_length: int
    num_genes: int

    @property
    def tail_length(self) -> int:
        return self.head_length * (self.max_arity - 1) + 1

    @property
    def gene_length(self) -> int:
        return self.head_length + self.tail_length

    @property
    def chromosome_length(self) -> int:
        return self.num_genes * self.gene_length

    @property
    def all_symbols(self) -> str:
        """Every symbol allowed in a head position."""
        return self.terminals + self.nonterminals

    def is_nonterminal(self, symbol: Symbol) -> bool:
        return symbol in self.nonterminals

    def is_head_position(self, position: int) -> bool:
        """True if chromosome position falls inside the head of its gene."""
        return position % self.gene_length < self.head_length

    def split_genes(self, chromosome: Chromosome) -> List[str]:
        """
        Fracture a chromosome into its genes.

        Args:
            chromosome: Flat symbol sequence

        Returns:
            List of genes, each gene_length symbols long
        """
        glen = self.gene_length
        return [chromosome[i:i + glen] for i in range(0, len(chromosome), glen)]

    @staticmethod
    def join_genes(genes: List[str]) -> Chromosome:
        return "".join(genes)


@dataclass(frozen=True)
class Rates:
    """
    Per-run genetic operator rates, each a probability in [0, 1].

    Attributes:
        mutate: Per-position mutation probability
        one_point: Fraction of the breeding pool in 1-point recombination pairs
        two_point: Fraction of the breeding pool in 2-point recombination pairs
        gene: Fraction of the breeding pool in gene recombination pairs
        is_transpose: Fraction of the breeding pool undergoing IS transposition
        ris_transpose: Fraction of the breeding pool undergoing RIS transposition
        gene_transpose: Fraction of the breeding pool undergoing gene transposition
    """
    mutate: float
    one_point: float
    two_point: float
    gene: float
    is_transpose: float
    ris_transpose: float
    gene_transpose: float


@dataclass(frozen=True)
class SimParams:
    """
    Simulation parameters, fixed for the whole run.

    Attributes:
        pop_size: Number of chromosomes in the population
        selection_range: M in the GEP fitness equations
        max_fitness: Fitness value that ends the run when hit exactly
        num_generations: Generation budget
        max_is_len: Longest IS transposon
        max_ris_len: Longest RIS transposon
        roulette_exponent: Exponent applied to rank-based roulette weights
    """
    pop_size: int
    selection_range: float
    max_fitness: float
    num_generations: int
    max_is_len: int
    max_ris_len: int
    roulette_exponent: float


@dataclass
class RunResult:
    """
    Outcome of a complete evolution run.

    Attributes:
        best_fitness: Fitness of the elite chromosome of the final population
        best_chromosome: First chromosome of the final population
        generations: Number of generation steps executed
        history: Best fitness after each generation
        converged: True if the run stopped on an exact max_fitness match
        seed: Seed used for the random stream
        metadata: Additional information (paths of written outputs, etc.)
    """
    best_fitness: float
    best_chromosome: Chromosome
    generations: int
    history: List[float] = field(default_factory=list)
    converged: bool = False
    seed: Optional[int] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert run result to a plain dictionary for YAML export.

        Returns:
            Dictionary with serializable values
        """
        return {
            "best_fitness": float(self.best_fitness),
            "best_chromosome": self.best_chromosome,
            "generations": self.generations,
            "converged": self.converged,
            "seed": self.seed,
            "history": [float(f) for f in self.history],
            "metadata": dict(self.metadata),
        }
