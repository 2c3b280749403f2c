#!/usr/bin/env python3
"""
GEP CLI - Minimal entry point.

This is the command-line interface for symbolic regression with gene
expression programming. All configuration is specified in YAML files.

Usage:
    python3 gep_cli.py run_config.yaml
    python3 gep_cli.py --config run_config.yaml
    python3 gep_cli.py --help
    gep run_config.yaml            (installed console script)

Examples:
    # Fit the bundled quadratic data set
    python3 gep_cli.py examples/regression_run.yaml
"""

import sys


def main():
    """Main entry point for GEP CLI."""
    # Handle help
    if len(sys.argv) < 2 or sys.argv[1] in ['-h', '--help', 'help']:
        print(__doc__)
        sys.exit(0 if len(sys.argv) > 1 else 1)

    # Parse config path
    config_path = sys.argv[1]

    if config_path.startswith('--config='):
        config_path = config_path.split('=', 1)[1]
    elif config_path == '--config':
        if len(sys.argv) < 3:
            print("Error: --config requires an argument")
            print(__doc__)
            sys.exit(1)
        config_path = sys.argv[2]

    # Import and run
    try:
        from gep.cli import run_from_config
        run_from_config(config_path)
    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        sys.exit(1)
    except Exception as e:
        print(f"\nError: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
