"""CLI entry point for antx."""

import sys


def main() -> int:
    """Main entry point for the antx CLI."""
    from antx.cli import run_cli

    return run_cli(sys.argv[1:])


if __name__ == "__main__":
    sys.exit(main())
