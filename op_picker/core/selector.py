"""
Interactive selection through a fuzzy finder.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..managers.log_manager import ComponentLoggerAdapter
from .process_utils import ProcessNotFoundError, ProcessUtils

# fzf: 1 = no match, 130 = interrupted with Esc / Ctrl-C
FZF_NO_SELECTION_CODES = (1, 130)


class SelectorError(Exception):
  """The selector could not be run."""

  pass


class SelectorBase(ABC):
  @abstractmethod
  def select(self, options: list[str], prompt: str = "") -> Optional[str]:
    """
    Present options and return the chosen one, or None when nothing was chosen.
    """
    raise NotImplementedError


class FzfSelector(SelectorBase):
  """Selector backed by fzf. The list is fed on stdin; fzf draws on the terminal."""

  def __init__(self, logger: ComponentLoggerAdapter, fzf_bin: str = "fzf", extra_args: Optional[list[str]] = None):
    self.logger = logger
    self.fzf_bin = fzf_bin
    self.extra_args = extra_args or []

  def select(self, options: list[str], prompt: str = "") -> Optional[str]:
    if not options:
      self.logger.debug("Nothing to select from")
      return None

    cmd = [self.fzf_bin, "--no-multi"]
    if prompt:
      cmd.append(f"--prompt={prompt}> ")
    cmd.extend(self.extra_args)

    try:
      result = ProcessUtils.run(cmd, self.logger, input="\n".join(options), capture_stderr=False)
    except ProcessNotFoundError as e:
      raise SelectorError(f"{e}. Is fzf installed?") from None

    if result.returncode in FZF_NO_SELECTION_CODES:
      return None
    if result.returncode != 0:
      raise SelectorError(f"{self.fzf_bin} exited with status {result.returncode}")

    choice = (result.stdout or "").rstrip("\n")
    return choice or None
