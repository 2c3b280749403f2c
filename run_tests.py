#!/usr/bin/env python3
"""
Test runner for the GEP engine
"""

import unittest
import sys
from pathlib import Path

# Add current directory to path for imports
sys.path.insert(0, str(Path(__file__).parent))

TEST_DIRS = ['tests/test_gep', 'tests/test_regression']


def run_all_tests():
    """Run all test modules"""
    loader = unittest.TestLoader()
    suite = unittest.TestSuite()

    root = Path(__file__).parent
    for test_dir in TEST_DIRS:
        suite.addTests(loader.discover(str(root / test_dir), top_level_dir=str(root / test_dir)))

    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(suite)

    return result.wasSuccessful()


def run_integration_test():
    """Run a short regression on the bundled example data"""
    print("\n" + "=" * 50)
    print("INTEGRATION TEST")
    print("=" * 50)

    import tempfile
    from gep.orchestration import run_regression

    root = Path(__file__).parent / "examples"
    with tempfile.TemporaryDirectory() as output_dir:
        result = run_regression({
            'params': str(root / "params.yaml"),
            'fitness_cases': str(root / "cases.csv"),
            'random_seed': 42,
            'num_generations': 50,
            'report_every': 10,
            'output': {'root': str(Path(output_dir) / "run"), 'dot': True},
        })

    success = (
        result.generations <= 50 and
        len(result.history) == result.generations
    )

    if success:
        print("✓ Integration test PASSED")
    else:
        print("✗ Integration test FAILED")

    return success


if __name__ == "__main__":
    print("Running GEP Tests")
    print("=" * 60)

    # Run unit tests
    print("Running unit tests...")
    unit_success = run_all_tests()

    # Run integration test
    integration_success = run_integration_test()

    # Summary
    print("\n" + "=" * 60)
    print("TEST SUMMARY")
    print("=" * 60)
    print(f"Unit tests: {'PASSED' if unit_success else 'FAILED'}")
    print(f"Integration test: {'PASSED' if integration_success else 'FAILED'}")

    overall_success = unit_success and integration_success
    print(f"Overall: {'PASSED' if overall_success else 'FAILED'}")

    sys.exit(0 if overall_success else 1)
