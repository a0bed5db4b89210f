"""
op-picker - CLI Interface

Main CLI entry point for the op-picker command.
"""

import sys
from typing import Optional

from . import __version__
from .dispatcher import CommandDispatcher
from .managers.app_manager import AppManager

GLOBAL_FLAGS = ("--debug", "--version")


def _split_global_flags(argv: list[str]) -> tuple[set[str], list[str]]:
  """Peel leading global flags off the command line."""
  flags = set()
  while argv and argv[0] in GLOBAL_FLAGS:
    flags.add(argv.pop(0))
  return flags, argv


def main(argv: Optional[list[str]] = None) -> None:
  """Main CLI entry point."""

  if sys.version_info < (3, 9):  # noqa: UP036
    print(f"❌ op-picker requires Python 3.9+, found Python {sys.version_info.major}.{sys.version_info.minor}")
    sys.exit(1)

  flags, args = _split_global_flags(list(sys.argv[1:] if argv is None else argv))

  if "--version" in flags:
    print(f"op-picker {__version__}")
    sys.exit(0)

  app = AppManager(debug="--debug" in flags)

  sys.exit(CommandDispatcher(app).dispatch(args))


if __name__ == "__main__":
  main()
