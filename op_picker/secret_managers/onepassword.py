"""
op-picker - 1Password Secret Store Implementation

Talks to 1Password through the `op` command line client.
"""

from typing import Any, Optional

from ..core.common_utils import CommonUtils, UtilsError
from ..core.process_utils import ProcessNotFoundError, ProcessUtils
from ..managers.common_config import CommonConfig
from ..managers.log_manager import PickerLogger
from .base import (
  AuthenticationError,
  ConfigurationError,
  ItemReference,
  SecretManagerError,
  SecretNotFoundError,
  SecretStoreBase,
)

AUTH_ERROR_MARKERS = ("not signed in", "session expired", "authorization", "unauthorized", "invalid session")


class OnePasswordSecretStore(SecretStoreBase):
  """
  1Password secret store using the `op` CLI.

  The session token obtained from `op signin --raw` is handed to every call
  through `--session`, so nothing depends on OP_SESSION_* variables.
  """

  name = "1password"

  def __init__(self, log_manager: PickerLogger, config: CommonConfig) -> None:
    super().__init__(log_manager, config)
    self.logger = log_manager.get_logger(name="secret_managers", component="1password")
    self.op_bin = config.op_bin
    self.account = config.account

  def _run(self, args: list[str], token: Optional[str] = None, interactive: bool = False) -> Any:
    cmd = [self.op_bin, *args]
    if token is not None:
      cmd.extend(["--session", token])
    try:
      return ProcessUtils.run(cmd, self.logger, capture_stderr=not interactive)
    except ProcessNotFoundError as e:
      raise ConfigurationError(f"{e}. Is the 1Password CLI installed?") from None

  def _raise_for_status(self, result: Any, action: str) -> None:
    if result.returncode == 0:
      return
    stderr = (result.stderr or "").strip()
    if any(marker in stderr.lower() for marker in AUTH_ERROR_MARKERS):
      raise AuthenticationError(f"1Password rejected the session while trying to {action}: {stderr}")
    raise SecretManagerError(f"Failed to {action}: {stderr or f'op exited with status {result.returncode}'}")

  def authenticate(self) -> str:
    """
    Sign in interactively and return the raw session token.

    stdin and stderr stay attached to the terminal so `op` can prompt for the
    account password.
    """
    args = ["signin", "--raw"]
    if self.account:
      args.extend(["--account", self.account])

    result = self._run(args, interactive=True)
    if result.returncode != 0:
      raise AuthenticationError(f"op signin failed with status {result.returncode}")

    token = (result.stdout or "").strip()
    if not token:
      raise AuthenticationError("op signin did not return a session token")

    self.logger.info("1Password sign-in successful")
    return token

  def probe(self, token: str) -> bool:
    result = self._run(["user", "list"], token=token)
    return result.returncode == 0

  def list_items(self, token: str) -> list[ItemReference]:
    result = self._run(["item", "list", "--format", "json"], token=token)
    self._raise_for_status(result, "list items")

    try:
      raw_items = CommonUtils.parse_json("op item list", result.stdout or "[]")
    except UtilsError as e:
      raise SecretManagerError(str(e)) from None

    items = []
    for raw in raw_items or []:
      vault = raw.get("vault") or {}
      items.append(
        ItemReference(
          id=raw.get("id", ""),
          title=raw.get("title", ""),
          vault=vault.get("name") if isinstance(vault, dict) else None,
        )
      )
    self.logger.debug(f"Listed {len(items)} items")
    return items

  def get_concealed(self, token: str, item_id: str) -> Optional[str]:
    result = self._run(
      ["item", "get", item_id, "--fields", "type=concealed", "--format", "json", "--reveal"],
      token=token,
    )
    if result.returncode != 0:
      self.logger.debug(f"No concealed field for item {item_id}")
      return None

    try:
      data = CommonUtils.parse_json("op item get", result.stdout or "null")
    except UtilsError:
      return None

    # A list means the item holds more than one concealed field.
    if isinstance(data, list):
      if len(data) != 1:
        self.logger.debug(f"Item {item_id} has {len(data)} concealed fields")
        return None
      data = data[0]

    if not isinstance(data, dict):
      return None
    value = data.get("value")
    return str(value) if value else None

  def list_fields(self, token: str, item_id: str) -> list[str]:
    result = self._run(["item", "get", item_id, "--format", "json"], token=token)
    self._raise_for_status(result, f"read item {item_id}")

    try:
      item = CommonUtils.parse_json("op item get", result.stdout or "{}")
    except UtilsError as e:
      raise SecretManagerError(str(e)) from None

    labels: list[str] = []
    for field in item.get("fields", []):
      label = field.get("label")
      if label and label not in labels:
        labels.append(label)
    return labels

  def get_field(self, token: str, item_id: str, field: str) -> str:
    result = self._run(["item", "get", item_id, "--fields", f"label={field}", "--reveal"], token=token)
    if result.returncode != 0:
      raise SecretNotFoundError(f"Field '{field}' not found in item {item_id}")
    return (result.stdout or "").rstrip("\n")

  def get_otp(self, token: str, item_id: str) -> str:
    result = self._run(["item", "get", item_id, "--otp"], token=token)
    if result.returncode != 0:
      raise SecretNotFoundError(f"Item {item_id} has no one-time password")
    return (result.stdout or "").strip()
