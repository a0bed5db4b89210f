"""
External command helpers.
"""

import subprocess
from collections.abc import Sequence
from typing import Optional

from ..managers.log_manager import ComponentLoggerAdapter


class ProcessNotFoundError(Exception):
  """The external command is not installed or not on PATH."""

  pass


class ProcessUtils:
  """Provides static utility methods for running the external collaborators."""

  @staticmethod
  def run(
    args: Sequence[str],
    logger: ComponentLoggerAdapter,
    input: Optional[str] = None,
    capture_stderr: bool = True,
  ) -> subprocess.CompletedProcess:
    """
    Run an external command and return its completed process.

    Only the program name and sub-command are logged: arguments may carry a
    session token.

    Args:
        args: Command and arguments
        logger: The logger instance to use for reporting status.
        input: Text fed on stdin
        capture_stderr: Capture stderr instead of inheriting the terminal

    Returns:
        subprocess.CompletedProcess with text output

    Raises:
        ProcessNotFoundError: If the program does not exist
    """
    logger.debug(f"Running: {' '.join(args[:3])}")
    try:
      result = subprocess.run(
        list(args),
        input=input,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE if capture_stderr else None,
        text=True,
        check=False,
      )
    except FileNotFoundError:
      raise ProcessNotFoundError(f"Command not found: {args[0]}") from None

    if result.returncode != 0:
      logger.debug(f"{args[0]} exited with status {result.returncode}")
    return result
