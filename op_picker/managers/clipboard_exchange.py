"""
op-picker - Clipboard Exchange

Puts a secret on the clipboard for a bounded window and puts the previous
clipboard content back afterwards, whichever way the process leaves:
window expiry, an exception in the command, sys.exit, or a signal.

Usage:
    with ClipboardExchange(log_manager, provider, window=15) as exchange:
      exchange.expose(secret)
"""

import atexit
import signal
import time
from collections.abc import Callable
from types import FrameType, TracebackType
from typing import Any, Optional

from ..core.clipboard import ClipboardError, ClipboardProvider
from .log_manager import PickerLogger

HANDLED_SIGNALS = tuple(
  getattr(signal, name) for name in ("SIGINT", "SIGTERM", "SIGHUP") if hasattr(signal, name)
)


class ClipboardExchange:
  def __init__(
    self,
    log_manager: PickerLogger,
    provider: ClipboardProvider,
    window: float = 15,
    notifier: Optional[Callable[[str], None]] = None,
    sleep: Callable[[float], None] = time.sleep,
  ) -> None:
    """
    Args:
      log_manager: The logger manager instance.
      provider: Clipboard copy/paste capability.
      window: Default exposure window in seconds.
      notifier: Overrides provider.notify when given.
      sleep: Blocking wait, replaced in tests.
    """
    self.logger = log_manager.get_logger(name="clipboard_exchange", component="clipboard")
    self.provider = provider
    self.window = window
    self.notifier = notifier or provider.notify
    self._sleep = sleep

    self._snapshot: Optional[str] = None
    self._restored = False
    self._restoring = False
    self._deferred_signal: Optional[int] = None
    self._guard_installed = False
    self._previous_handlers: dict[int, Any] = {}

  def __enter__(self) -> "ClipboardExchange":
    self.install_guard()
    return self

  def __exit__(
    self,
    exc_type: Optional[type[BaseException]],
    exc: Optional[BaseException],
    tb: Optional[TracebackType],
  ) -> None:
    try:
      self.restore()
    finally:
      # Kept while the snapshot is still pending so the exit hook retries
      if not self.exposed:
        self.remove_guard()

  @property
  def exposed(self) -> bool:
    """True while a secret sits on the clipboard and has not been restored."""
    return self._snapshot is not None and not self._restored

  def install_guard(self) -> None:
    """Register the exit hook and signal handlers. Safe to call repeatedly."""
    if self._guard_installed:
      return
    atexit.register(self.restore)
    for signum in HANDLED_SIGNALS:
      try:
        self._previous_handlers[signum] = signal.signal(signum, self._on_signal)
      except ValueError:
        # Not the main thread
        self.logger.debug(f"Could not install handler for signal {signum}")
    self._guard_installed = True

  def remove_guard(self) -> None:
    if not self._guard_installed:
      return
    atexit.unregister(self.restore)
    for signum, handler in self._previous_handlers.items():
      signal.signal(signum, handler)
    self._previous_handlers.clear()
    self._guard_installed = False

  def _on_signal(self, signum: int, frame: Optional[FrameType]) -> None:
    if self._restoring:
      self._deferred_signal = signum
      return
    self.logger.info(f"Received signal {signum} during clipboard exposure")
    raise SystemExit(128 + signum)

  def _announce(self, message: str) -> None:
    print(message)
    try:
      self.notifier(message)
    except Exception as e:
      self.logger.debug(f"Notification failed: {e}")

  def expose(self, value: str, window: Optional[float] = None) -> None:
    """
    Copy value to the clipboard, wait for the window, then restore.

    Args:
        value: The secret
        window: Seconds to keep it there (default: the exchange's window)

    Raises:
        ClipboardError: If a secret is already exposed or the copy fails
    """
    if self.exposed:
      raise ClipboardError("A secret is already on the clipboard")

    self.install_guard()
    try:
      snapshot = self.provider.paste()
    except Exception as e:
      self.logger.warning(f"Could not read clipboard, it will be emptied afterwards: {e}")
      snapshot = ""
    self._snapshot = snapshot
    self._restored = False

    self.provider.copy(value)

    seconds = self.window if window is None else window
    self._announce(f"Copied to clipboard. Clearing in {seconds:g} seconds.")
    self.logger.info(f"Secret exposed for {seconds:g}s")

    self._sleep(seconds)
    self.restore()

  def restore(self) -> bool:
    """
    Put the snapshot back on the clipboard, at most once per exposure.

    A failing copy is logged, never raised. Handled signals arriving while the
    copy runs are held back and re-raised as SystemExit once it is done. If the
    copy is interrupted by anything else the exposure stays pending, so a later
    call (the exit hook) tries again.

    Returns:
        bool: True if this call performed the restoration

    Raises:
        SystemExit: If a handled signal arrived during the restoration
    """
    if not self.exposed or self._restoring:
      return False

    self._restoring = True
    try:
      try:
        self.provider.copy(self._snapshot or "")
      except Exception as e:
        self.logger.error(f"Failed to restore clipboard: {e}")
      else:
        self.logger.info("Clipboard restored")
      self._restored = True
    finally:
      self._restoring = False

    self._announce("Clipboard cleared.")

    deferred, self._deferred_signal = self._deferred_signal, None
    if deferred is not None:
      self.logger.info(f"Received signal {deferred} while restoring the clipboard")
      raise SystemExit(128 + deferred)
    return True
