from typing import Optional

from ..core.clipboard import ClipboardError, ClipboardProvider, PyperclipClipboard
from ..core.selector import FzfSelector, SelectorBase
from ..secret_managers.base import ConfigurationError, SecretStoreBase
from ..secret_managers.factory import SecretManagerFactory
from .clipboard_exchange import ClipboardExchange
from .common_config import CommonConfig
from .extension_manager import CommandRegistry, ExtensionManager
from .log_manager import ComponentLoggerAdapter, PickerLogger
from .secret_resolver import SecretResolver
from .session_manager import SessionManager


class AppManager:
  def __init__(
    self,
    log_file: Optional[str] = None,
    debug: bool = False,
  ) -> None:
    """
    A service locator for the components of one invocation.

    Components are created lazily, so a command like `clear` never touches
    the secret store or the clipboard.

    Args:
      log_file: Optional log file name.
      debug: Debug logging, mirrored on stderr.
    """
    self._log_manager = PickerLogger(log_file=log_file, debug=debug)
    self._config: Optional[CommonConfig] = None

    # Lazy Load
    self._secret_store: Optional[SecretStoreBase] = None
    self._selector: Optional[SelectorBase] = None
    self._session_manager: Optional[SessionManager] = None
    self._secret_resolver: Optional[SecretResolver] = None
    self._extensions: Optional[CommandRegistry] = None
    self._clipboard: Optional[ClipboardProvider] = None

  @property
  def log_manager(self) -> PickerLogger:
    return self._log_manager

  @property
  def config(self) -> CommonConfig:
    if self._config is None:
      self._config = CommonConfig()
    return self._config

  @property
  def secret_store(self) -> SecretStoreBase:
    """Get fully configured secret store client."""
    if self._secret_store is None:
      self._secret_store = SecretManagerFactory.create(self._log_manager, self.config)
    return self._secret_store

  @property
  def selector(self) -> SelectorBase:
    if self._selector is None:
      self._selector = FzfSelector(
        self.get_logger("selector", "selector"),
        fzf_bin=self.config.fzf_bin,
        extra_args=self.config.extra_fzf_args,
      )
    return self._selector

  @property
  def session_manager(self) -> SessionManager:
    """Get fully configured SessionManager instance."""
    if self._session_manager is None:
      self._session_manager = SessionManager(self._log_manager, self.secret_store, self.config.get_session_path())
    return self._session_manager

  @property
  def secret_resolver(self) -> SecretResolver:
    """Get fully configured SecretResolver instance."""
    if self._secret_resolver is None:
      self._secret_resolver = SecretResolver(self._log_manager, self.secret_store, self.selector)
    return self._secret_resolver

  @property
  def extensions(self) -> CommandRegistry:
    """Load the extension file once per invocation."""
    if self._extensions is None:
      self._extensions = ExtensionManager(self._log_manager, self.config.get_extension_path()).load()
    return self._extensions

  @property
  def clipboard(self) -> ClipboardProvider:
    """The extension's clipboard provider, or the system clipboard."""
    if self._clipboard is None:
      provider = self.extensions.clipboard
      if provider is None:
        system_clipboard = PyperclipClipboard(self.get_logger("clipboard", "clipboard"))
        try:
          system_clipboard.check_available()
        except ClipboardError as e:
          raise ConfigurationError(f"System clipboard unavailable: {e}") from None
        provider = system_clipboard
      self._clipboard = provider
    return self._clipboard

  def new_exchange(self) -> ClipboardExchange:
    return ClipboardExchange(
      self._log_manager,
      self.clipboard,
      window=self.config.clip_time,
      notifier=self.extensions.notifier,
    )

  def get_logger(
    self,
    name: Optional[str] = None,
    component: Optional[str] = None,
  ) -> ComponentLoggerAdapter:
    """
    Get fully configured logger instance.
    Args:
        name: Optional logger name
        component: Optional component name for logging
    Returns:
        ComponentLoggerAdapter: Configured logger instance
    """
    return self._log_manager.get_logger(name=name, component=component)
