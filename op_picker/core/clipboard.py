"""
Clipboard and notification capabilities.

A provider must implement copy() and paste(); notify() is optional and does
nothing unless overridden.
"""

import shutil
import subprocess
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Optional

import pyperclip

from ..managers.log_manager import ComponentLoggerAdapter


class ClipboardError(Exception):
  """Clipboard access failed."""

  pass


class ClipboardProvider(ABC):
  @abstractmethod
  def copy(self, text: str) -> None:
    raise NotImplementedError

  @abstractmethod
  def paste(self) -> str:
    raise NotImplementedError

  def notify(self, message: str) -> None:
    return None


class PyperclipClipboard(ClipboardProvider):
  """System clipboard via pyperclip, desktop notifications via notify-send."""

  APP_NAME = "op-picker"

  def __init__(self, logger: ComponentLoggerAdapter) -> None:
    self.logger = logger
    self._notify_bin = shutil.which("notify-send")

  def check_available(self) -> None:
    """
    Make sure pyperclip found a copy/paste mechanism on this system.

    Raises:
        ClipboardError: If only the placeholder backend is available
    """
    try:
      copy_fn, paste_fn = pyperclip.determine_clipboard()
    except pyperclip.PyperclipException as e:
      raise ClipboardError(str(e)) from None
    # pyperclip's "no clipboard" placeholders are falsy
    if not copy_fn or not paste_fn:
      raise ClipboardError("no copy/paste mechanism found (install xclip, xsel or wl-clipboard)")

  def copy(self, text: str) -> None:
    try:
      pyperclip.copy(text)
    except pyperclip.PyperclipException as e:
      raise ClipboardError(f"Clipboard copy failed: {e}") from None

  def paste(self) -> str:
    try:
      return pyperclip.paste() or ""
    except pyperclip.PyperclipException as e:
      raise ClipboardError(f"Clipboard paste failed: {e}") from None

  def notify(self, message: str) -> None:
    if not self._notify_bin:
      return
    try:
      subprocess.run([self._notify_bin, self.APP_NAME, message], check=False, capture_output=True)
    except OSError as e:
      self.logger.debug(f"Notification failed: {e}")


class FunctionClipboard(ClipboardProvider):
  """Provider assembled from plain callables defined by an extension."""

  def __init__(
    self,
    copy: Callable[[str], None],
    paste: Callable[[], str],
    notify: Optional[Callable[[str], None]] = None,
  ) -> None:
    self._copy = copy
    self._paste = paste
    self._notify = notify

  def copy(self, text: str) -> None:
    self._copy(text)

  def paste(self) -> str:
    return self._paste() or ""

  def notify(self, message: str) -> None:
    if self._notify is not None:
      self._notify(message)
