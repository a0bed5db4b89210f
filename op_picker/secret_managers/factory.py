# factory.py
import os
from dataclasses import dataclass, field

from ..managers.common_config import CommonConfig
from ..managers.log_manager import PickerLogger
from .base import SecretStoreBase
from .onepassword import OnePasswordSecretStore

SECRET_MANAGERS = {
  "1password": OnePasswordSecretStore,
}


class FactoryConfigError(Exception):
  """FactoryConfigError-related errors."""

  pass


@dataclass
class FactoryConfig:
  """Configuration for selecting the active secret store."""

  secret_manager: str = field(default_factory=str)

  def __post_init__(self) -> None:
    """Initialize from environment variables after dataclass creation."""
    secret_manager = os.getenv("OP_PICKER_SECRET_MANAGER") or "1password"
    if secret_manager not in SECRET_MANAGERS:
      raise FactoryConfigError(f"secret_manager {secret_manager} must be one of: {list(SECRET_MANAGERS.keys())}")
    self.secret_manager = secret_manager


class SecretManagerFactory:
  @classmethod
  def create(cls, log_manager: PickerLogger, config: CommonConfig) -> SecretStoreBase:
    """Factory method to create the configured secret store client."""
    factory_config = FactoryConfig()
    manager_class = SECRET_MANAGERS[factory_config.secret_manager]
    return manager_class(log_manager, config)
