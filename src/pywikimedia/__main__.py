"""Command-line entry point for `python -m pywikimedia`.

Each invocation sends one API request and prints the decoded response as JSON.
"""

from asyncio import run
from logging import INFO, basicConfig
from sys import argv

from .main import parser

__all__ = ("main",)


def main() -> None:
    """Parse `argv` and run the selected subcommand under INFO logging."""
    basicConfig(level=INFO)
    entry = parser().parse_args(argv[1:])
    run(entry.invoke(entry))


if __name__ == "__main__":
    main()
