"""Command-line entry point."""

from __future__ import annotations

import argparse
from collections.abc import Sequence


def main(argv: Sequence[str] | None = None) -> int:
    """Greet and exit."""
    parser = argparse.ArgumentParser(prog="kazuka")
    parser.parse_args(argv)
    print("Hello, world!")
    return 0