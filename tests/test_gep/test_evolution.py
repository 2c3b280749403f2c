"""
Tests for the generation step and evolution loop.
"""

import math
import unittest
import numpy as np

from gep.data_models import Genome, Rates, SimParams
from gep.mutation import new_population
from gep.evolution import (
    put_together,
    apply_operators,
    fill_filter_gap,
    generation_step,
    evolution_loop,
)


def identity_express(chromosome, genome):
    return chromosome


def count_a(expressed, case, expected, m):
    return float(expressed.count('a'))


def always_nan(expressed, case, expected, m):
    return math.nan


class EvolutionTestCase(unittest.TestCase):

    def setUp(self):
        self.genome = Genome(
            terminals="ab",
            nonterminals="+-*/",
            gene_connector="+",
            max_arity=2,
            head_length=4,
            num_genes=2
        )
        self.rates = Rates(
            mutate=0.05,
            one_point=0.3,
            two_point=0.3,
            gene=0.1,
            is_transpose=0.1,
            ris_transpose=0.1,
            gene_transpose=0.1
        )
        self.params = SimParams(
            pop_size=20,
            selection_range=100.0,
            max_fitness=float(self.genome.chromosome_length),
            num_generations=30,
            max_is_len=3,
            max_ris_len=3,
            roulette_exponent=1.0
        )
        self.test_dict = [{}]
        self.test_outs = [0.0]

    def initial_population(self, seed=0):
        return new_population(self.genome, self.params.pop_size, np.random.default_rng(seed))

    def step(self, population, rng, fitness_fn=count_a, rates=None):
        return generation_step(
            population, self.genome, self.params, rates or self.rates,
            identity_express, fitness_fn, self.test_dict, self.test_outs, rng
        )

    def assertValidChromosome(self, chromosome):
        self.assertEqual(len(chromosome), self.genome.chromosome_length)
        for gene in self.genome.split_genes(chromosome):
            self.assertTrue(all(s in self.genome.terminals for s in gene[self.genome.head_length:]))


class TestPutTogether(unittest.TestCase):
    """Test splicing replacements back by index."""

    def test_splice(self):
        self.assertEqual(
            put_together([1, 3], ["X", "Y"], ["A", "B", "C", "D"]),
            ["A", "X", "C", "Y"]
        )

    def test_empty_indices_copy(self):
        original = ["A", "B"]
        result = put_together([], [], original)
        self.assertEqual(result, original)
        self.assertIsNot(result, original)

    def test_replace_everything(self):
        self.assertEqual(put_together([0, 1, 2], list("XYZ"), list("ABC")), list("XYZ"))

    def test_length_mismatch(self):
        with self.assertRaises(ValueError):
            put_together([1, 2], ["X"], ["A", "B", "C"])

    def test_out_of_range(self):
        with self.assertRaises(IndexError):
            put_together([1, 4], ["X", "Y"], ["A", "B", "C", "D"])

    def test_unsorted_or_repeated(self):
        with self.assertRaises(IndexError):
            put_together([3, 1], ["X", "Y"], ["A", "B", "C", "D"])
        with self.assertRaises(IndexError):
            put_together([1, 1], ["X", "Y"], ["A", "B", "C", "D"])


class TestOperatorPipeline(EvolutionTestCase):
    """Test the operator stages applied to the breeding pool."""

    def test_size_and_invariants_preserved(self):
        full = Rates(1.0, 1.0, 1.0, 1.0, 1.0, 1.0, 1.0)
        rng = np.random.default_rng(11)
        for _ in range(10):
            pool = new_population(self.genome, 19, rng)
            bred = apply_operators(pool, self.genome, self.params, full, rng)

            self.assertEqual(len(bred), 19)
            for chromosome in bred:
                self.assertValidChromosome(chromosome)

    def test_zero_rates_pass_through(self):
        zero = Rates(0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0)
        pool = new_population(self.genome, 9, np.random.default_rng(1))
        bred = apply_operators(pool, self.genome, self.params, zero, np.random.default_rng(2))
        self.assertEqual(bred, pool)

    def test_gene_transpose_touches_floor_of_rate(self):
        """Exactly floor(n * rate) chromosomes change, drawn from the whole pool."""
        only_gt = Rates(0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.5)
        # Two distinct genes, so every transposition swaps them
        pool = [
            "+" + "ab"[i % 2] + "baaaaaa" + "*" + "ab"[i // 5] + "bbbbbbb"
            for i in range(10)
        ]
        touched = set()
        for seed in range(20):
            bred = apply_operators(pool, self.genome, self.params, only_gt,
                                   np.random.default_rng(seed))
            changed = [i for i in range(10) if bred[i] != pool[i]]

            self.assertEqual(len(changed), 5)
            for i in changed:
                genes = self.genome.split_genes(pool[i])
                self.assertEqual(bred[i], self.genome.join_genes(genes[::-1]))
            touched.update(changed)

        self.assertEqual(touched, set(range(10)))

    def test_one_point_touches_at_most_two_per_pair(self):
        only_one_point = Rates(0.0, 0.3, 0.0, 0.0, 0.0, 0.0, 0.0)
        total_changed = 0
        for seed in range(10):
            pool = new_population(self.genome, 10, np.random.default_rng(100 + seed))
            bred = apply_operators(pool, self.genome, self.params, only_one_point,
                                   np.random.default_rng(seed))
            changed = [i for i in range(10) if bred[i] != pool[i]]

            self.assertEqual(len(bred), 10)
            self.assertLessEqual(len(changed), 2 * 3)
            for p in range(self.genome.chromosome_length):
                self.assertEqual(sorted(c[p] for c in bred), sorted(c[p] for c in pool))
            total_changed += len(changed)

        self.assertGreater(total_changed, 0)

    def test_fill_filter_gap(self):
        rng = np.random.default_rng(4)
        pairs = [(5.0, "x"), (3.0, "y")]

        filled = fill_filter_gap(pairs, 5, self.genome, rng)
        self.assertEqual(len(filled), 5)
        self.assertEqual(filled[:2], pairs)
        self.assertTrue(all(f == 0.0 for f, _ in filled[2:]))

        self.assertEqual(fill_filter_gap(pairs, 2, self.genome, rng), pairs)
        self.assertEqual(fill_filter_gap(pairs, 1, self.genome, rng), pairs)


class TestGenerationStep(EvolutionTestCase):
    """Test a single generation."""

    def test_population_size_preserved(self):
        population = self.initial_population()
        best_fitness, new_pop = self.step(population, np.random.default_rng(1))

        self.assertEqual(len(new_pop), len(population))
        for chromosome in new_pop:
            self.assertValidChromosome(chromosome)

    def test_elite_first(self):
        """The best chromosome leads the new population and matches best_fitness."""
        population = self.initial_population()
        counts = [c.count('a') for c in population]
        expected = population[counts.index(max(counts))]

        best_fitness, new_pop = self.step(population, np.random.default_rng(1))

        self.assertEqual(best_fitness, float(max(counts)))
        self.assertEqual(new_pop[0], expected)

    def test_all_degenerate_fitness(self):
        """With every fitness NaN the step still yields a full population."""
        population = self.initial_population()
        best_fitness, new_pop = self.step(population, np.random.default_rng(1), always_nan)

        self.assertEqual(best_fitness, 0.0)
        self.assertEqual(len(new_pop), len(population))
        for chromosome in new_pop:
            self.assertValidChromosome(chromosome)

    def test_partially_degenerate_fitness(self):
        """Chromosomes scoring infinity are never the elite."""
        def inf_for_b_root(expressed, case, expected, m):
            return math.inf if expressed[0] == 'b' else float(expressed.count('a'))

        population = self.initial_population(seed=3)
        best_fitness, new_pop = self.step(population, np.random.default_rng(1), inf_for_b_root)

        self.assertTrue(math.isfinite(best_fitness))
        self.assertEqual(len(new_pop), len(population))

    def test_without_operators_only_selects(self):
        zero = Rates(0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0)
        population = self.initial_population()
        _, new_pop = self.step(population, np.random.default_rng(1), rates=zero)

        self.assertTrue(set(new_pop) <= set(population))

    def test_deterministic(self):
        population = self.initial_population()
        first = self.step(population, np.random.default_rng(77))
        second = self.step(population, np.random.default_rng(77))
        self.assertEqual(first, second)

    def test_population_too_small(self):
        with self.assertRaises(ValueError):
            self.step(self.initial_population()[:1], np.random.default_rng(0))

    def test_two_chromosome_population(self):
        population = self.initial_population()[:2]
        best_fitness, new_pop = self.step(population, np.random.default_rng(0))
        self.assertEqual(len(new_pop), 2)


class TestEvolutionLoop(EvolutionTestCase):
    """Test the bounded evolution loop."""

    def run_loop(self, population, rng, max_generations, target, fitness_fn=count_a, callback=None):
        return evolution_loop(
            population, self.genome, self.params, self.rates,
            identity_express, fitness_fn, self.test_dict, self.test_outs,
            max_generations, target, rng, on_generation=callback
        )

    def test_runs_full_budget_without_target(self):
        calls = []
        self.run_loop(
            self.initial_population(), np.random.default_rng(0), 7, -1.0,
            callback=lambda g, f, p: calls.append(g)
        )
        self.assertEqual(calls, list(range(7)))

    def test_stops_on_exact_target(self):
        calls = []
        best_fitness, _ = self.run_loop(
            self.initial_population(), np.random.default_rng(0), 50, 5.0,
            fitness_fn=lambda e, c, t, m: 5.0,
            callback=lambda g, f, p: calls.append(g)
        )
        self.assertEqual(best_fitness, 5.0)
        self.assertEqual(calls, [0])

    def test_target_comparison_is_exact(self):
        calls = []
        self.run_loop(
            self.initial_population(), np.random.default_rng(0), 4, 5.0,
            fitness_fn=lambda e, c, t, m: 5.0 + 1e-12,
            callback=lambda g, f, p: calls.append(g)
        )
        self.assertEqual(len(calls), 4)

    def test_best_fitness_never_decreases(self):
        """The elite is carried over, so the best fitness is monotone."""
        history = []
        self.run_loop(
            self.initial_population(), np.random.default_rng(5), 25, -1.0,
            callback=lambda g, f, p: history.append(f)
        )
        self.assertEqual(len(history), 25)
        for earlier, later in zip(history, history[1:]):
            self.assertLessEqual(earlier, later)

    def test_deterministic_runs(self):
        """Two runs from the same seed produce identical populations and fitnesses."""
        def record(seed):
            trace = []
            result = self.run_loop(
                self.initial_population(), np.random.default_rng(seed), 15, -1.0,
                callback=lambda g, f, p: trace.append((f, list(p)))
            )
            return trace, result

        self.assertEqual(record(8), record(8))

    def test_returns_front_as_best(self):
        best_fitness, population = self.run_loop(
            self.initial_population(), np.random.default_rng(2), 5, -1.0
        )
        self.assertEqual(len(population), self.params.pop_size)
        self.assertEqual(best_fitness, float(population[0].count('a')))

    def test_needs_positive_budget(self):
        with self.assertRaises(ValueError):
            self.run_loop(self.initial_population(), np.random.default_rng(0), 0, 1.0)


if __name__ == '__main__':
    unittest.main()
