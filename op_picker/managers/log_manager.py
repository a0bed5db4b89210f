"""
op-picker - Logging

Every invocation appends to a rotating log file under OP_PICKER_LOG_DIR.
`--debug` lowers the level to DEBUG and mirrors the records on stderr.

Records carry the component that wrote them. Anything shaped like an
`op ... --session <token>` argument is masked before it reaches a handler;
secret values themselves must never be passed to these loggers.
"""

import logging
import logging.handlers
import os
import re
import sys
from collections.abc import MutableMapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

ROOT_LOGGER = "op_picker"
DEFAULT_LOG_FILE = "op-picker.log"
DEFAULT_LOG_LEVEL = "INFO"


def _default_log_dir() -> str:
  state_home = os.getenv("XDG_STATE_HOME") or str(Path.home() / ".local" / "state")
  return str(Path(state_home) / "op-picker")


@dataclass
class PickerLoggerConfig:
  """Where to log and how much."""

  log_dir: str = field(default_factory=_default_log_dir)
  log_level: str = DEFAULT_LOG_LEVEL
  log_file: str = DEFAULT_LOG_FILE
  debug: bool = False

  def __post_init__(self) -> None:
    """Initialize from environment variables after dataclass creation."""
    self.log_dir = os.getenv("OP_PICKER_LOG_DIR") or self.log_dir
    self.log_level = (os.getenv("OP_PICKER_LOG_LEVEL") or self.log_level).upper()
    if self.debug:
      self.log_level = "DEBUG"
    elif not isinstance(logging.getLevelName(self.log_level), int):
      # Unknown level names fall back to INFO
      self.log_level = DEFAULT_LOG_LEVEL

  @property
  def log_path(self) -> Path:
    return Path(self.log_dir).expanduser() / self.log_file


class SessionTokenFilter(logging.Filter):
  """Mask the value following `--session` in a log message."""

  PATTERN = re.compile(r"(--session[= ])\S+")

  def filter(self, record: logging.LogRecord) -> bool:
    message = record.getMessage()
    masked = self.PATTERN.sub(r"\1[REDACTED]", message)
    if masked != message:
      record.msg, record.args = masked, None
    return True


class ComponentLoggerAdapter(logging.LoggerAdapter):
  """
  Logger adapter that tags records with a component name.

  The component shows up as `[session]`, `[resolver]`, `[clipboard]` and so on
  in the log file.
  """

  def __init__(self, logger: logging.Logger, component: str) -> None:
    super().__init__(logger, {"component": component})
    self.component = component

  def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
    kwargs.setdefault("extra", {})["component"] = self.component
    return msg, kwargs


class PickerLogger:
  """
  Logging setup for one op-picker invocation.

  Configures the `op_picker` logger once and hands out component loggers
  below it.
  """

  MAX_BYTES = 1024 * 1024  # 1MB
  BACKUP_COUNT = 3

  LOG_FORMAT = "%(asctime)s %(levelname)-7s [%(component)s] %(name)s: %(message)s"
  DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

  def __init__(self, log_file: Optional[str] = None, debug: bool = False) -> None:
    """
    Args:
        log_file: File name inside the log directory (default: op-picker.log)
        debug: Log at DEBUG level and mirror records on stderr
    """
    self.config = PickerLoggerConfig(log_file=log_file or DEFAULT_LOG_FILE, debug=debug)
    self.console_output = debug
    self._logger = logging.getLogger(ROOT_LOGGER)
    self._adapters: dict[str, ComponentLoggerAdapter] = {}

    self._configure()

  def _configure(self) -> None:
    self._logger.setLevel(self.config.log_level)
    self._logger.handlers.clear()
    self._logger.propagate = False

    handlers: list[logging.Handler] = []
    try:
      self.config.log_path.parent.mkdir(parents=True, exist_ok=True, mode=0o700)
      handlers.append(
        logging.handlers.RotatingFileHandler(
          self.config.log_path,
          maxBytes=self.MAX_BYTES,
          backupCount=self.BACKUP_COUNT,
          encoding="utf-8",
        )
      )
    except OSError as e:
      print(f"⚠️  File logging disabled: {e}", file=sys.stderr)
      self.console_output = True

    if self.console_output:
      handlers.append(logging.StreamHandler(sys.stderr))

    formatter = logging.Formatter(self.LOG_FORMAT, self.DATE_FORMAT)
    token_filter = SessionTokenFilter()
    for handler in handlers:
      handler.setFormatter(formatter)
      handler.addFilter(token_filter)
      self._logger.addHandler(handler)

  def get_logger(self, name: Optional[str], component: Optional[str]) -> ComponentLoggerAdapter:
    """
    Get a component logger below `op_picker`.

    Args:
        name: Logger name, prefixed with `op_picker.` (default: the root logger)
        component: Component tag (default: 'system')

    Returns:
        ComponentLoggerAdapter instance
    """
    component = component or "system"
    logger_name = ROOT_LOGGER if not name or name == ROOT_LOGGER else f"{ROOT_LOGGER}.{name}"

    key = f"{logger_name}:{component}"
    if key not in self._adapters:
      self._adapters[key] = ComponentLoggerAdapter(logging.getLogger(logger_name), component)
    return self._adapters[key]
