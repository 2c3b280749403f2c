"""
Symbolic regression with GEP

Arithmetic expression individuals, regression fitness functions and
Graphviz export of evolved expressions.
"""

from .arithmetic import (
    Node,
    Expression,
    check_genome,
    express_individual,
    evaluate,
    fitness_absolute,
    fitness_relative,
    infix,
    FITNESS_FUNCTIONS,
)
from .dot_export import to_dot, dump_dot_file

__all__ = [
    'Node',
    'Expression',
    'check_genome',
    'express_individual',
    'evaluate',
    'fitness_absolute',
    'fitness_relative',
    'infix',
    'FITNESS_FUNCTIONS',
    'to_dot',
    'dump_dot_file',
]
