"""
Unit tests for the clipboard exchange: one snapshot per exposure, restored
exactly once on every exit path.
"""

import os
import signal
from typing import Optional
from unittest.mock import Mock, patch

import pytest

from op_picker.core.clipboard import ClipboardError, ClipboardProvider
from op_picker.managers.clipboard_exchange import ClipboardExchange


class FakeClipboard(ClipboardProvider):
  def __init__(self, content: str = "", fail_copy_on: Optional[int] = None) -> None:
    self.content = content
    self.copies: list[str] = []
    self.pastes = 0
    self.fail_copy_on = fail_copy_on

  def copy(self, text: str) -> None:
    self.copies.append(text)
    if self.fail_copy_on == len(self.copies):
      raise ClipboardError("xclip went away")
    self.content = text

  def paste(self) -> str:
    self.pastes += 1
    return self.content


class BrokenPasteClipboard(FakeClipboard):
  def paste(self) -> str:
    raise ClipboardError("no clipboard owner")


class ExitDuringRestoreClipboard(FakeClipboard):
  """The restoring copy is cut short once by SystemExit."""

  def copy(self, text: str) -> None:
    self.copies.append(text)
    if len(self.copies) == 2:
      raise SystemExit(130)
    self.content = text


class TestClipboardExchange:
  """Test cases for ClipboardExchange."""

  def setup_method(self) -> None:
    self.log_manager = Mock()
    self.clipboard = FakeClipboard("previous content")
    self.sleep = Mock()
    self.notifier = Mock()

  def make_exchange(self, window: float = 15) -> ClipboardExchange:
    return ClipboardExchange(self.log_manager, self.clipboard, window=window, notifier=self.notifier, sleep=self.sleep)

  def test_normal_expiry_restores_snapshot(self) -> None:
    seen_during_window = []
    self.sleep.side_effect = lambda seconds: seen_during_window.append(self.clipboard.content)

    with self.make_exchange() as exchange:
      exchange.expose("s3cret")

    self.sleep.assert_called_once_with(15)
    assert seen_during_window == ["s3cret"]
    assert self.clipboard.content == "previous content"
    assert self.clipboard.copies == ["s3cret", "previous content"]
    assert self.clipboard.pastes == 1

  def test_window_override(self) -> None:
    with self.make_exchange() as exchange:
      exchange.expose("s3cret", window=3)

    self.sleep.assert_called_once_with(3)

  def test_notifications_and_console_output(self, capsys: pytest.CaptureFixture) -> None:
    with self.make_exchange(window=10) as exchange:
      exchange.expose("s3cret")

    out = capsys.readouterr().out
    assert "Copied to clipboard. Clearing in 10 seconds." in out
    assert "Clipboard cleared." in out
    assert "s3cret" not in out
    self.notifier.assert_any_call("Copied to clipboard. Clearing in 10 seconds.")
    self.notifier.assert_any_call("Clipboard cleared.")

  def test_interruption_during_window_restores_once(self) -> None:
    self.sleep.side_effect = KeyboardInterrupt

    with pytest.raises(KeyboardInterrupt):
      with self.make_exchange() as exchange:
        exchange.expose("s3cret")

    assert self.clipboard.content == "previous content"
    assert self.clipboard.copies == ["s3cret", "previous content"]
    assert exchange.restore() is False

  def test_exit_during_window_keeps_status(self) -> None:
    self.sleep.side_effect = SystemExit(143)

    with pytest.raises(SystemExit) as excinfo:
      with self.make_exchange() as exchange:
        exchange.expose("s3cret")

    assert excinfo.value.code == 143
    assert self.clipboard.content == "previous content"

  def test_error_after_exposure_restores(self) -> None:
    with pytest.raises(RuntimeError):
      with self.make_exchange() as exchange:
        self.sleep.side_effect = RuntimeError("boom")
        exchange.expose("s3cret")

    assert self.clipboard.content == "previous content"
    assert self.clipboard.copies.count("previous content") == 1

  def test_sigterm_during_window_restores(self) -> None:
    """A real SIGTERM delivered while waiting exits with 128 + SIGTERM."""
    self.sleep.side_effect = lambda seconds: os.kill(os.getpid(), signal.SIGTERM)

    with pytest.raises(SystemExit) as excinfo:
      with self.make_exchange() as exchange:
        exchange.expose("s3cret")

    assert excinfo.value.code == 128 + signal.SIGTERM
    assert self.clipboard.content == "previous content"
    assert self.clipboard.copies == ["s3cret", "previous content"]

  def test_nothing_exposed_means_nothing_restored(self) -> None:
    with self.make_exchange() as exchange:
      pass

    assert exchange.restore() is False
    assert self.clipboard.copies == []
    assert self.clipboard.pastes == 0
    self.notifier.assert_not_called()

  def test_restore_is_idempotent(self) -> None:
    exchange = self.make_exchange()
    self.sleep.side_effect = KeyboardInterrupt

    with pytest.raises(KeyboardInterrupt):
      exchange.expose("s3cret")

    assert exchange.exposed is True
    assert exchange.restore() is True
    assert exchange.restore() is False
    assert self.clipboard.copies == ["s3cret", "previous content"]
    exchange.remove_guard()

  def test_failed_restore_does_not_raise(self) -> None:
    self.clipboard = FakeClipboard("previous content", fail_copy_on=2)

    with self.make_exchange() as exchange:
      exchange.expose("s3cret")

    assert self.clipboard.copies == ["s3cret", "previous content"]
    assert exchange.exposed is False

  def test_unreadable_clipboard_is_emptied_afterwards(self) -> None:
    self.clipboard = BrokenPasteClipboard("")

    with self.make_exchange() as exchange:
      exchange.expose("s3cret")

    assert self.clipboard.copies == ["s3cret", ""]

  def test_second_exposure_while_exposed_is_rejected(self) -> None:
    exchange = self.make_exchange()
    self.sleep.side_effect = lambda seconds: exchange.expose("other")

    with pytest.raises(ClipboardError):
      with exchange:
        exchange.expose("s3cret")

    assert self.clipboard.copies == ["s3cret", "previous content"]

  def test_consecutive_exposures_each_take_a_snapshot(self) -> None:
    with self.make_exchange() as exchange:
      exchange.expose("first")
      self.clipboard.content = "changed meanwhile"
      exchange.expose("second")

    assert self.clipboard.copies == ["first", "previous content", "second", "changed meanwhile"]
    assert self.clipboard.pastes == 2

  def test_notifier_defaults_to_provider(self) -> None:
    self.clipboard.notify = Mock()  # type: ignore[method-assign]
    exchange = ClipboardExchange(self.log_manager, self.clipboard, window=1, sleep=self.sleep)

    with exchange:
      exchange.expose("s3cret")

    assert self.clipboard.notify.call_count == 2

  def test_signal_during_restore_is_held_back(self) -> None:
    exchange = self.make_exchange()
    copy = self.clipboard.copy

    def copy_with_signal(text: str) -> None:
      if text == "previous content":
        exchange._on_signal(signal.SIGINT, None)
      copy(text)

    self.clipboard.copy = copy_with_signal  # type: ignore[method-assign]

    with pytest.raises(SystemExit) as excinfo:
      with exchange:
        exchange.expose("s3cret")

    assert excinfo.value.code == 128 + signal.SIGINT
    assert self.clipboard.content == "previous content"
    assert exchange.restore() is False
    assert signal.getsignal(signal.SIGINT) != exchange._on_signal

  def test_notifier_failure_is_ignored(self) -> None:
    self.notifier.side_effect = OSError("no dbus")

    with self.make_exchange() as exchange:
      exchange.expose("s3cret")

    assert self.clipboard.content == "previous content"


class TestExitGuard:
  """Test cases for the atexit / signal guard."""

  def test_guard_registers_atexit_once(self) -> None:
    exchange = ClipboardExchange(Mock(), FakeClipboard(), sleep=Mock())

    with patch("op_picker.managers.clipboard_exchange.atexit") as mock_atexit:
      exchange.install_guard()
      exchange.install_guard()
      mock_atexit.register.assert_called_once_with(exchange.restore)
      exchange.remove_guard()
      mock_atexit.unregister.assert_called_once_with(exchange.restore)

  def test_signal_handlers_installed_and_restored(self) -> None:
    previous = signal.getsignal(signal.SIGTERM)
    exchange = ClipboardExchange(Mock(), FakeClipboard(), sleep=Mock())

    with exchange:
      assert signal.getsignal(signal.SIGTERM) == exchange._on_signal

    assert signal.getsignal(signal.SIGTERM) == previous

  def test_signal_handler_exits_with_signal_status(self) -> None:
    exchange = ClipboardExchange(Mock(), FakeClipboard(), sleep=Mock())

    with pytest.raises(SystemExit) as excinfo:
      exchange._on_signal(signal.SIGINT, None)

    assert excinfo.value.code == 128 + signal.SIGINT

  def test_atexit_hook_restores_when_context_is_skipped(self) -> None:
    """restore() registered with atexit puts the snapshot back."""
    clipboard = FakeClipboard("before")
    sleep = Mock(side_effect=KeyboardInterrupt)
    exchange = ClipboardExchange(Mock(), clipboard, sleep=sleep)

    with patch("op_picker.managers.clipboard_exchange.atexit") as mock_atexit:
      with pytest.raises(KeyboardInterrupt):
        exchange.expose("s3cret")
      hook = mock_atexit.register.call_args[0][0]
      hook()
      hook()
      exchange.remove_guard()

    assert clipboard.copies == ["s3cret", "before"]

  def test_exit_during_restore_leaves_hook_to_finish(self) -> None:
    clipboard = ExitDuringRestoreClipboard("user clipboard")
    exchange = ClipboardExchange(Mock(), clipboard, sleep=Mock(side_effect=SystemExit(130)))

    with patch("op_picker.managers.clipboard_exchange.atexit") as mock_atexit:
      with pytest.raises(SystemExit):
        with exchange:
          exchange.expose("s3cret")

      assert exchange.exposed is True
      mock_atexit.unregister.assert_not_called()
      hook = mock_atexit.register.call_args[0][0]
      assert hook() is True
      exchange.remove_guard()

    assert clipboard.content == "user clipboard"
    assert clipboard.copies == ["s3cret", "user clipboard", "user clipboard"]
