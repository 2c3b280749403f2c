"""
Graphviz export of expressed arithmetic individuals.
"""

from pathlib import Path
from typing import List, Optional, Union

from .arithmetic import Expression, Node


def _emit(node: Node, lines: List[str], counter: List[int]) -> str:
    name = f"n{counter[0]}"
    counter[0] += 1
    label = node.symbol.replace('"', '\\"')
    lines.append(f'  {name} [label="{label}"];')
    for child in node.children:
        child_name = _emit(child, lines, counter)
        lines.append(f"  {name} -> {child_name};")
    return name


def to_dot(expression: Expression, graph_name: str = "individual") -> str:
    """
    Render an expression as a Graphviz digraph.

    The gene trees hang below a root node labelled with the gene connector.

    Args:
        expression: Expressed chromosome
        graph_name: Name of the digraph

    Returns:
        Dot source text
    """
    lines = [f"digraph {graph_name} {{"]
    counter = [0]

    if len(expression.trees) == 1:
        _emit(expression.trees[0], lines, counter)
    else:
        root = Node(expression.connector, list(expression.trees))
        _emit(root, lines, counter)

    lines.append("}")
    return "\n".join(lines) + "\n"


def dump_dot_file(path: Optional[Union[str, Path]], expression: Expression) -> Optional[Path]:
    """
    Write the dot rendering of an expression, if a path is given.

    Returns:
        Path written, or None when path is None
    """
    if path is None:
        return None

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        f.write(to_dot(expression))

    return path
