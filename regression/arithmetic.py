"""
Arithmetic individuals for symbolic regression.

A gene is read in Karva notation: the first symbol is the root and the
following symbols fill the tree level by level, each nonterminal taking as
many children as its arity. Whatever is left of the gene after the tree is
complete is non-coding. The trees of all genes are linked with the gene
connector into one expression.
"""

from dataclasses import dataclass, field
from typing import Dict, List
import numpy as np

from gep.data_models import Genome, Chromosome, TestCase


ARITY: Dict[str, int] = {
    '+': 2,
    '-': 2,
    '*': 2,
    '/': 2,
    'Q': 1,  # square root
    'N': 1,  # negation
}


@dataclass
class Node:
    """Expression tree node."""
    symbol: str
    children: List["Node"] = field(default_factory=list)

    def size(self) -> int:
        return 1 + sum(child.size() for child in self.children)

    def depth(self) -> int:
        return 1 + max((child.depth() for child in self.children), default=0)


@dataclass
class Expression:
    """
    Expressed chromosome: one tree per gene plus the linking function.

    Attributes:
        trees: Expression tree of each gene, in gene order
        connector: Binary operator linking the gene trees left to right
    """
    trees: List[Node]
    connector: str


def arity(symbol: str) -> int:
    """Arity of a symbol; anything that is not an operator is a terminal."""
    return ARITY.get(symbol, 0)


def express_gene(gene: str) -> Node:
    """
    Build the expression tree of one gene.

    Args:
        gene: Gene in Karva notation

    Returns:
        Root node of the tree

    Raises:
        ValueError: If the gene runs out of symbols before the tree is complete
    """
    root = Node(gene[0])
    level = [root]
    position = 1

    while level:
        next_level = []
        for node in level:
            for _ in range(arity(node.symbol)):
                if position >= len(gene):
                    raise ValueError(f"Gene {gene!r} is too short for its expression tree")
                child = Node(gene[position])
                position += 1
                node.children.append(child)
                next_level.append(child)
        level = next_level

    return root


def check_genome(genome: Genome) -> None:
    """
    Check that a genome's symbols all have an arithmetic meaning.

    Raises:
        ValueError: On an unknown nonterminal, a max_arity below an operator's
            arity, or a gene connector that is not binary
    """
    unknown = [s for s in genome.nonterminals if s not in ARITY]
    if unknown:
        raise ValueError(f"Unsupported nonterminal symbols: {''.join(unknown)}")
    highest = max((ARITY[s] for s in genome.nonterminals), default=0)
    if highest > genome.max_arity:
        raise ValueError(
            f"max_arity {genome.max_arity} is below the arity {highest} of nonterminals "
            f"{genome.nonterminals!r}; tails would be too short"
        )
    if arity(genome.gene_connector) != 2:
        raise ValueError(f"Gene connector {genome.gene_connector!r} is not a binary operator")


def express_individual(chromosome: Chromosome, genome: Genome) -> Expression:
    """
    Express a chromosome into a multi-gene arithmetic expression.

    Raises:
        ValueError: If the genome does not pass check_genome
    """
    check_genome(genome)

    return Expression(
        trees=[express_gene(gene) for gene in genome.split_genes(chromosome)],
        connector=genome.gene_connector
    )


def _apply(symbol: str, args: List[np.float64]) -> np.float64:
    if symbol == '+':
        return args[0] + args[1]
    if symbol == '-':
        return args[0] - args[1]
    if symbol == '*':
        return args[0] * args[1]
    if symbol == '/':
        return args[0] / args[1]
    if symbol == 'Q':
        return np.sqrt(args[0])
    if symbol == 'N':
        return -args[0]
    raise ValueError(f"Unknown operator: {symbol!r}")


def _terminal_value(symbol: str, case: TestCase) -> np.float64:
    if symbol in case:
        return np.float64(case[symbol])
    if symbol.isdigit():
        return np.float64(int(symbol))
    raise KeyError(f"Terminal {symbol!r} has no value in the test case")


def evaluate_tree(node: Node, case: TestCase) -> np.float64:
    """Evaluate a tree with float64 semantics (inf/nan instead of errors)."""
    if not node.children:
        return _terminal_value(node.symbol, case)
    return _apply(node.symbol, [evaluate_tree(child, case) for child in node.children])


def evaluate(expression: Expression, case: TestCase) -> float:
    """
    Evaluate an expression on one test case.

    Division by zero and square roots of negatives give inf or nan, which
    the fitness filter removes later.

    Args:
        expression: Expressed chromosome
        case: Mapping from terminal symbol to value

    Returns:
        Value of the expression
    """
    with np.errstate(all='ignore'):
        value = evaluate_tree(expression.trees[0], case)
        for tree in expression.trees[1:]:
            value = _apply(expression.connector, [value, evaluate_tree(tree, case)])
    return float(value)


def fitness_absolute(
    expression: Expression,
    case: TestCase,
    expected: float,
    selection_range: float
) -> float:
    """Per-case fitness with absolute error: M - |C - T|."""
    return selection_range - abs(evaluate(expression, case) - expected)


def fitness_relative(
    expression: Expression,
    case: TestCase,
    expected: float,
    selection_range: float
) -> float:
    """Per-case fitness with relative error in percent: M - |100 (C - T) / T|."""
    value = evaluate(expression, case)
    with np.errstate(all='ignore'):
        error = np.float64(100.0) * (np.float64(value) - expected) / np.float64(expected)
    return selection_range - abs(float(error))


FITNESS_FUNCTIONS = {
    'absolute': fitness_absolute,
    'relative': fitness_relative,
}


def infix_tree(node: Node) -> str:
    """Fully parenthesized infix form of a tree."""
    if not node.children:
        return node.symbol
    if node.symbol == 'Q':
        return f"sqrt({infix_tree(node.children[0])})"
    if node.symbol == 'N':
        return f"(-{infix_tree(node.children[0])})"
    left, right = node.children
    return f"({infix_tree(left)}{node.symbol}{infix_tree(right)})"


def infix(expression: Expression) -> str:
    """Infix form of a whole expression, genes linked left to right."""
    text = infix_tree(expression.trees[0])
    for tree in expression.trees[1:]:
        text = f"({text}{expression.connector}{infix_tree(tree)})"
    return text
