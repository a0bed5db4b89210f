"""
op-picker - Secret Store Base Class

Abstract base class defining the interface the resolver and session manager
use to talk to a secret-management command.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ..managers.common_config import CommonConfig
from ..managers.log_manager import PickerLogger


class SecretManagerError(Exception):
  """Base exception for secret store operations."""

  pass


class AuthenticationError(SecretManagerError):
  """Authentication-related errors."""

  pass


class ConfigurationError(SecretManagerError):
  """Configuration-related errors."""

  pass


class SecretNotFoundError(SecretManagerError):
  """Secret not found errors."""

  pass


@dataclass
class ItemReference:
  """An item returned by the store's listing call."""

  id: str
  title: str
  vault: Optional[str] = None

  @property
  def label(self) -> str:
    """Text shown in the selector."""
    if self.vault:
      return f"{self.title} [{self.vault}]"
    return self.title


class SecretStoreBase(ABC):
  """
  Abstract base class for all secret store clients.

  Every call except authenticate() takes the session token explicitly.
  """

  name: str = "base"

  def __init__(self, log_manager: PickerLogger, config: CommonConfig) -> None:
    """
    Initialize the secret store client.

    Args:
      log_manager: The logger manager instance.
      config: Common configuration.
    """
    self.logger = log_manager.get_logger(name="secret_managers", component="base")
    self.config = config

  @abstractmethod
  def authenticate(self) -> str:
    """
    Run the interactive sign-in and return a new session token.

    Raises:
        AuthenticationError: If sign-in fails or yields no token
    """
    raise NotImplementedError

  @abstractmethod
  def probe(self, token: str) -> bool:
    """Cheap authenticated call used to check that a cached token is still valid."""
    raise NotImplementedError

  @abstractmethod
  def list_items(self, token: str) -> list[ItemReference]:
    """
    List the items visible to the session.

    Raises:
        AuthenticationError: If the token is rejected
        SecretManagerError: For other errors
    """
    raise NotImplementedError

  @abstractmethod
  def get_concealed(self, token: str, item_id: str) -> Optional[str]:
    """
    Fetch the value of the item's single concealed field.

    Returns None when the item has no such field, several of them, or the
    fetch fails for any reason.
    """
    raise NotImplementedError

  @abstractmethod
  def list_fields(self, token: str, item_id: str) -> list[str]:
    """List the field names of an item."""
    raise NotImplementedError

  @abstractmethod
  def get_field(self, token: str, item_id: str, field: str) -> str:
    """
    Fetch one field value.

    Raises:
        SecretNotFoundError: If the field cannot be read
    """
    raise NotImplementedError

  @abstractmethod
  def get_otp(self, token: str, item_id: str) -> str:
    """
    Generate the current one-time password of an item.

    Raises:
        SecretNotFoundError: If the item has no OTP field
    """
    raise NotImplementedError

  def __repr__(self) -> str:
    """String representation of the secret store."""
    return f"{self.__class__.__name__}"
