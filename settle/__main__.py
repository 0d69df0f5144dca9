"""
Entry point.

Run: python -m settle
"""

import asyncio

from settle.cli import run_cli


def main() -> None:
    asyncio.run(run_cli())


if __name__ == "__main__":
    main()
