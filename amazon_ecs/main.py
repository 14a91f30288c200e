"""Console entry point for the ``amazon-ecs`` script."""
from __future__ import annotations

import sys

from .ui.cli import run_cli


def main() -> int:
    return run_cli(sys.argv[1:])


if __name__ == "__main__":
    raise SystemExit(main())
