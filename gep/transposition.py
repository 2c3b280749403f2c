"""
Transposition operators: IS, RIS and gene transposition.

All three relocate material inside a single chromosome without changing its
length. IS and RIS only ever rewrite a gene head, so tails keep holding
terminals.
"""

import numpy as np

from .data_models import Genome, Chromosome
from .random_stream import next_int


def _insert_into_head(head: str, segment: str, position: int) -> str:
    """Insert segment at position, dropping whatever overflows the head."""
    return (head[:position] + segment + head[position:])[:len(head)]


def is_transpose(
    chromosome: Chromosome,
    genome: Genome,
    max_is_len: int,
    rng: np.random.Generator
) -> Chromosome:
    """
    Insertion sequence (IS) transposition.

    A transposon of up to max_is_len symbols is copied from the tail of a
    random gene and inserted into the head of a random gene, at any head
    position except the root. Head symbols after the insertion point shift
    right and the overflow past the head boundary is dropped.

    Draw order: transposon length, source gene, source start, target gene,
    insertion point.

    Args:
        chromosome: Chromosome to transpose
        genome: Genome describing gene layout
        max_is_len: Longest transposon
        rng: Random number generator

    Returns:
        Transposed chromosome of the same length
    """
    if genome.head_length < 2 or max_is_len < 1:
        return chromosome

    genes = genome.split_genes(chromosome)
    h = genome.head_length

    length = next_int(rng, 1, max_is_len)

    source = genes[next_int(rng, 0, genome.num_genes - 1)]
    start = next_int(rng, h, genome.gene_length - 1)
    transposon = source[start:start + length]

    target_index = next_int(rng, 0, genome.num_genes - 1)
    insertion = next_int(rng, 1, h - 1)

    target = genes[target_index]
    genes[target_index] = _insert_into_head(target[:h], transposon, insertion) + target[h:]

    return genome.join_genes(genes)


def ris_transpose(
    chromosome: Chromosome,
    genome: Genome,
    max_ris_len: int,
    rng: np.random.Generator
) -> Chromosome:
    """
    Root insertion sequence (RIS) transposition.

    Within the head of a random gene, a transposon starting on a nonterminal
    becomes the new root: it is copied to the front of the head, the head
    shifts right, and the overflow at the head boundary is dropped. Genes
    whose head holds no nonterminal are left alone.

    Draw order: gene, nonterminal position (only if one exists),
    transposon length.

    Args:
        chromosome: Chromosome to transpose
        genome: Genome describing gene layout
        max_ris_len: Longest transposon
        rng: Random number generator

    Returns:
        Transposed chromosome of the same length
    """
    if max_ris_len < 1:
        return chromosome

    genes = genome.split_genes(chromosome)
    h = genome.head_length

    gene_index = next_int(rng, 0, genome.num_genes - 1)
    gene = genes[gene_index]
    head = gene[:h]

    candidates = [i for i, symbol in enumerate(head) if genome.is_nonterminal(symbol)]
    if not candidates:
        return chromosome

    start = candidates[next_int(rng, 0, len(candidates) - 1)]
    length = next_int(rng, 1, max_ris_len)
    transposon = head[start:min(start + length, h)]

    genes[gene_index] = _insert_into_head(head, transposon, 0) + gene[h:]

    return genome.join_genes(genes)


def gene_transpose(
    chromosome: Chromosome,
    genome: Genome,
    rng: np.random.Generator
) -> Chromosome:
    """
    Gene transposition.

    A random gene other than the first moves to the front of the chromosome;
    the genes it passes shift back by one slot.

    Args:
        chromosome: Chromosome to transpose
        genome: Genome describing gene layout
        rng: Random number generator

    Returns:
        Chromosome with reordered genes
    """
    if genome.num_genes < 2:
        return chromosome

    genes = genome.split_genes(chromosome)
    moved = next_int(rng, 1, genome.num_genes - 1)

    return genome.join_genes([genes[moved]] + genes[:moved] + genes[moved + 1:])
