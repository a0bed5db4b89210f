import os
from dataclasses import dataclass, field
from pathlib import Path

from ..core.common_utils import CommonUtils, UtilsError


class CommonConfigError(Exception):
  """CommonConfig-related errors."""

  pass


def _config_home() -> Path:
  return Path(os.getenv("XDG_CONFIG_HOME") or Path.home() / ".config") / "op-picker"


def session_file_from_env() -> str:
  """Session file location, resolved without validating the rest of the configuration."""
  return os.getenv("OP_PICKER_SESSION_FILE") or str(_config_home() / "session")


@dataclass
class CommonConfig:
  """Common configuration settings."""

  session_file: str = ""
  extension_file: str = ""
  clip_time: int = 15
  op_bin: str = "op"
  fzf_bin: str = "fzf"
  account: str = ""
  extra_fzf_args: list = field(default_factory=list)

  def __post_init__(self) -> None:
    """Initialize from environment variables after dataclass creation."""
    self.session_file = session_file_from_env()
    self.extension_file = os.getenv("OP_PICKER_EXTENSION_FILE") or str(_config_home() / "extensions.py")
    self.op_bin = os.getenv("OP_PICKER_OP_BIN") or self.op_bin
    self.fzf_bin = os.getenv("OP_PICKER_FZF_BIN") or self.fzf_bin
    self.account = os.getenv("OP_PICKER_ACCOUNT", self.account)

    clip_time = os.getenv("OP_PICKER_CLIP_TIME")
    if clip_time:
      try:
        self.clip_time = CommonUtils.parse_duration(clip_time)
      except UtilsError as e:
        raise CommonConfigError(f"OP_PICKER_CLIP_TIME: {e}") from None

    fzf_opts = os.getenv("OP_PICKER_FZF_OPTS", "")
    if fzf_opts:
      self.extra_fzf_args = fzf_opts.split()

  def get_session_path(self) -> Path:
    """
    Get the session file path.
    Returns:
        Path: Session file path
    """
    return Path(self.session_file).expanduser()

  def get_extension_path(self) -> Path:
    """
    Get the extension source path.
    Returns:
        Path: Extension file path
    """
    return Path(self.extension_file).expanduser()
