"""Metamodel CLI entry point: python -m metamodel"""

from __future__ import annotations

import sys

from metamodel.cli import main

if __name__ == "__main__":
    sys.exit(main())
