import os
from collections.abc import Generator
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
  """Keep every test away from the real config, session and log directories."""
  for var in list(os.environ):
    if var.startswith("OP_PICKER_"):
      monkeypatch.delenv(var)
  monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
  monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "state"))
  monkeypatch.setenv("OP_PICKER_LOG_DIR", str(tmp_path / "logs"))
  yield
