"""
op-picker - Session Manager

Owns the cached session token: reuses it while the store accepts it,
renews it through interactive sign-in otherwise.

Known limitation: no file locking. Two invocations signing in at the same
time each overwrite the whole file, so the last token written wins.
"""

import os
from pathlib import Path
from typing import Optional

from ..secret_managers.base import AuthenticationError, SecretStoreBase
from .log_manager import PickerLogger

SESSION_FILE_MODE = 0o600
SESSION_DIR_MODE = 0o700


class SessionManager:
  def __init__(self, log_manager: PickerLogger, secret_store: SecretStoreBase, session_path: Path) -> None:
    """
    Args:
      log_manager: The logger manager instance.
      secret_store: Client used to probe and obtain tokens.
      session_path: Where the token is cached.
    """
    self.logger = log_manager.get_logger(name="session_manager", component="session")
    self.secret_store = secret_store
    self.session_path = session_path

  def read_token(self) -> Optional[str]:
    """
    Read the cached token.

    Returns:
        The token, or None when the file is missing, unreadable or empty.
    """
    try:
      token = self.session_path.read_text().strip()
    except FileNotFoundError:
      return None
    except OSError as e:
      self.logger.warning(f"Could not read session file {self.session_path}: {e}")
      return None
    return token or None

  def _write_token(self, token: str) -> None:
    """Overwrite the session file with the token, owner read/write only."""
    self.session_path.parent.mkdir(parents=True, exist_ok=True, mode=SESSION_DIR_MODE)
    fd = os.open(self.session_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, SESSION_FILE_MODE)
    try:
      # The mode passed to os.open only applies to newly created files
      os.fchmod(fd, SESSION_FILE_MODE)
      os.write(fd, token.encode())
    finally:
      os.close(fd)
    self.logger.debug(f"Session token written to {self.session_path}")

  def ensure_session(self, force: bool = False) -> str:
    """
    Return a usable session token, signing in when needed.

    Args:
        force: Discard any cached token and sign in again.

    Returns:
        str: The session token

    Raises:
        AuthenticationError: If sign-in does not yield a token
    """
    if force:
      self.logger.info("Forced sign-in requested, discarding cached session")
      self.clear()
    else:
      cached = self.read_token()
      if cached:
        if self.secret_store.probe(cached):
          self.logger.debug("Cached session is valid")
          return cached
        self.logger.info("Cached session rejected, signing in again")

    token = self.secret_store.authenticate()
    if not token:
      raise AuthenticationError("Sign-in did not return a session token")

    self._write_token(token)
    self.logger.info("New session cached")
    return token

  def clear(self) -> None:
    """Delete the session file. A missing file is not an error."""
    try:
      self.session_path.unlink()
      self.logger.info(f"Removed session file {self.session_path}")
    except FileNotFoundError:
      self.logger.debug("No session file to remove")
