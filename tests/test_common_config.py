import os
from pathlib import Path
from unittest import TestCase
from unittest.mock import patch

from op_picker.managers.common_config import CommonConfig, CommonConfigError


class TestCommonConfig(TestCase):
  """Test cases for CommonConfig class."""

  def test_defaults_follow_xdg_config_home(self) -> None:
    with patch.dict(os.environ, {"XDG_CONFIG_HOME": "/tmp/xdg"}):
      config = CommonConfig()

    self.assertEqual(config.get_session_path(), Path("/tmp/xdg/op-picker/session"))
    self.assertEqual(config.get_extension_path(), Path("/tmp/xdg/op-picker/extensions.py"))
    self.assertEqual(config.clip_time, 15)
    self.assertEqual(config.op_bin, "op")
    self.assertEqual(config.fzf_bin, "fzf")
    self.assertEqual(config.account, "")
    self.assertEqual(config.extra_fzf_args, [])

  def test_environment_overrides(self) -> None:
    env = {
      "OP_PICKER_SESSION_FILE": "/run/user/1000/op-session",
      "OP_PICKER_EXTENSION_FILE": "/etc/op-picker/ext.py",
      "OP_PICKER_CLIP_TIME": "1m",
      "OP_PICKER_OP_BIN": "/opt/op",
      "OP_PICKER_FZF_BIN": "sk",
      "OP_PICKER_ACCOUNT": "team.1password.com",
      "OP_PICKER_FZF_OPTS": "--height=40% --reverse",
    }
    with patch.dict(os.environ, env):
      config = CommonConfig()

    self.assertEqual(config.get_session_path(), Path("/run/user/1000/op-session"))
    self.assertEqual(config.get_extension_path(), Path("/etc/op-picker/ext.py"))
    self.assertEqual(config.clip_time, 60)
    self.assertEqual(config.op_bin, "/opt/op")
    self.assertEqual(config.fzf_bin, "sk")
    self.assertEqual(config.account, "team.1password.com")
    self.assertEqual(config.extra_fzf_args, ["--height=40%", "--reverse"])

  def test_session_path_expands_user(self) -> None:
    with patch.dict(os.environ, {"OP_PICKER_SESSION_FILE": "~/.op-session"}):
      config = CommonConfig()

    self.assertEqual(config.get_session_path(), Path.home() / ".op-session")

  def test_invalid_clip_time(self) -> None:
    with patch.dict(os.environ, {"OP_PICKER_CLIP_TIME": "soon"}):
      with self.assertRaises(CommonConfigError) as context:
        CommonConfig()

    self.assertIn("OP_PICKER_CLIP_TIME", str(context.exception))

  def test_empty_binaries_fall_back_to_defaults(self) -> None:
    with patch.dict(os.environ, {"OP_PICKER_OP_BIN": "", "OP_PICKER_FZF_BIN": ""}):
      config = CommonConfig()

    self.assertEqual(config.op_bin, "op")
    self.assertEqual(config.fzf_bin, "fzf")
