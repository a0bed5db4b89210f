from .base import (
  AuthenticationError,
  ConfigurationError,
  ItemReference,
  SecretManagerError,
  SecretNotFoundError,
  SecretStoreBase,
)

__all__ = [
  "AuthenticationError",
  "ConfigurationError",
  "ItemReference",
  "SecretManagerError",
  "SecretNotFoundError",
  "SecretStoreBase",
]
