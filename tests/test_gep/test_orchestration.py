"""
End-to-end tests for the regression run workflow and CLI entry.
"""

import io
import sys
import unittest
import tempfile
import shutil
from contextlib import redirect_stdout
from unittest import mock
from pathlib import Path
import yaml

from gep.orchestration import run_regression
from gep.cli import run_from_config
from gep.io_utils import load_run_summary
import gep_cli


EXAMPLES = Path(__file__).resolve().parents[2] / "examples"


class TestRunRegression(unittest.TestCase):
    """Test a short regression run writing its outputs."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.temp_path = Path(self.temp_dir)

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def run_config(self, root, **overrides):
        config = {
            'params': str(EXAMPLES / "params.yaml"),
            'fitness_cases': str(EXAMPLES / "cases.csv"),
            'random_seed': 3,
            'num_generations': 8,
            'report_every': 2,
            'output': {'root': str(root), 'dot': True, 'plot': True},
        }
        config.update(overrides)
        return config

    def test_run_writes_outputs(self):
        root = self.temp_path / "run"
        with redirect_stdout(io.StringIO()) as out:
            result = run_regression(self.run_config(root))

        self.assertLessEqual(result.generations, 8)
        self.assertEqual(len(result.history), result.generations)
        self.assertEqual(result.best_fitness, result.history[-1])
        self.assertEqual(result.seed, 3)

        for name in ['fitness_history.csv', 'summary.yaml', 'best.dot', 'fitness_history.png']:
            self.assertTrue((root / name).exists(), name)

        summary = load_run_summary(root / 'summary.yaml')
        self.assertEqual(summary.best_chromosome, result.best_chromosome)
        self.assertIn("INFIX :", out.getvalue())

    def test_same_seed_same_result(self):
        with redirect_stdout(io.StringIO()):
            first = run_regression(self.run_config(self.temp_path / "a"))
            second = run_regression(self.run_config(self.temp_path / "b"))

        self.assertEqual(first.history, second.history)
        self.assertEqual(first.best_chromosome, second.best_chromosome)

    def test_existing_output_without_overwrite(self):
        root = self.temp_path / "exists"
        root.mkdir()
        with redirect_stdout(io.StringIO()):
            with self.assertRaises(FileExistsError):
                run_regression(self.run_config(root))

    def test_max_arity_below_operator_arity(self):
        """A genome whose tails cannot close its trees stops before any output."""
        data = yaml.safe_load((EXAMPLES / "params.yaml").read_text())
        data['genome']['max_arity'] = 1
        params_path = self.temp_path / "params.yaml"
        with open(params_path, 'w') as f:
            yaml.safe_dump(data, f)

        root = self.temp_path / "arity"
        with redirect_stdout(io.StringIO()):
            with self.assertRaises(ValueError) as ctx:
                run_regression(self.run_config(root, params=str(params_path)))
        self.assertIn("max_arity", str(ctx.exception))
        self.assertFalse(root.exists())

    def test_run_from_config_file(self):
        root = self.temp_path / "cli"
        config_path = self.temp_path / "run.yaml"
        config = self.run_config(root, fitness='relative')
        config['output'] = {'root': str(root)}
        with open(config_path, 'w') as f:
            yaml.safe_dump(config, f)

        with redirect_stdout(io.StringIO()):
            run_from_config(str(config_path))

        self.assertTrue((root / 'summary.yaml').exists())
        self.assertFalse((root / 'best.dot').exists())


class TestCommandLine(unittest.TestCase):
    """Test the gep_cli entry point argument handling."""

    def run_main(self, *args):
        with mock.patch.object(sys, 'argv', ['gep'] + list(args)):
            with redirect_stdout(io.StringIO()) as out:
                with self.assertRaises(SystemExit) as ctx:
                    gep_cli.main()
        return ctx.exception.code, out.getvalue()

    def test_help(self):
        code, out = self.run_main('--help')
        self.assertEqual(code, 0)
        self.assertIn("Usage:", out)

    def test_no_arguments(self):
        code, _ = self.run_main()
        self.assertEqual(code, 1)

    def test_config_flag_without_path(self):
        code, out = self.run_main('--config')
        self.assertEqual(code, 1)
        self.assertIn("--config requires an argument", out)

    def test_missing_config_file(self):
        code, out = self.run_main('--config=/nonexistent/run.yaml')
        self.assertEqual(code, 1)
        self.assertIn("Error:", out)


if __name__ == '__main__':
    unittest.main()
