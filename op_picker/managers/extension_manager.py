"""
op-picker - Extension Manager

Loads the user's extension file and collects the commands and clipboard
capabilities it provides.

An extension file is trusted Python. It can:

  def register(registry):
    registry.add_command("token", handler, help="copy an API token")
    registry.set_clipboard(MyClipboard())
    registry.set_notifier(lambda message: ...)

or simply define module-level callables:

  def picker_token(ctx):
    '''copy an API token'''

  def clipboard_copy(text): ...
  def clipboard_paste(): ...
  def notify(message): ...
"""

import importlib.util
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from types import ModuleType
from typing import TYPE_CHECKING, Any, Optional

from ..core.clipboard import ClipboardProvider, FunctionClipboard
from ..secret_managers.base import ConfigurationError
from .log_manager import PickerLogger

if TYPE_CHECKING:
  from .app_manager import AppManager
  from .clipboard_exchange import ClipboardExchange

COMMAND_PREFIX = "picker_"
EXTENSION_MODULE_NAME = "op_picker_extensions"


@dataclass
class CommandContext:
  """What an extension handler gets to work with."""

  args: list[str]
  token: Optional[str]
  app: "AppManager"
  exchange: "ClipboardExchange"


CommandHandler = Callable[[CommandContext], Optional[int]]


@dataclass
class ExtensionCommand:
  name: str
  handler: CommandHandler
  help: str = ""
  requires_session: bool = True


def validate_clipboard(provider: Any) -> None:
  """
  Check that a provider has the required copy and paste methods.

  Raises:
      ConfigurationError: If either is missing
  """
  missing = [name for name in ("copy", "paste") if not callable(getattr(provider, name, None))]
  if missing:
    raise ConfigurationError(f"Clipboard provider {provider!r} does not define: {', '.join(missing)}")


def _first_doc_line(obj: Any) -> str:
  doc = (getattr(obj, "__doc__", None) or "").strip()
  return doc.splitlines()[0] if doc else ""


@dataclass
class CommandRegistry:
  """Commands and capabilities contributed by extensions."""

  commands: dict[str, ExtensionCommand] = field(default_factory=dict)
  clipboard: Optional[ClipboardProvider] = None
  notifier: Optional[Callable[[str], None]] = None

  def add_command(
    self,
    name: str,
    handler: CommandHandler,
    help: Optional[str] = None,
    requires_session: bool = True,
  ) -> None:
    if not name or not callable(handler):
      raise ConfigurationError(f"Invalid extension command {name!r}")
    self.commands[name] = ExtensionCommand(
      name=name,
      handler=handler,
      help=help if help is not None else _first_doc_line(handler),
      requires_session=requires_session,
    )

  def set_clipboard(self, provider: Any) -> None:
    validate_clipboard(provider)
    self.clipboard = provider

  def set_notifier(self, notifier: Callable[[str], None]) -> None:
    if not callable(notifier):
      raise ConfigurationError(f"Notifier {notifier!r} is not callable")
    self.notifier = notifier

  def get(self, name: str) -> Optional[ExtensionCommand]:
    return self.commands.get(name)

  def __contains__(self, name: object) -> bool:
    return name in self.commands


class ExtensionManager:
  def __init__(self, log_manager: PickerLogger, extension_path: Path) -> None:
    self.logger = log_manager.get_logger(name="extension_manager", component="extensions")
    self.extension_path = extension_path

  def _import(self) -> ModuleType:
    spec = importlib.util.spec_from_file_location(EXTENSION_MODULE_NAME, self.extension_path)
    if spec is None or spec.loader is None:
      raise ConfigurationError(f"Cannot load extension file {self.extension_path}")
    module = importlib.util.module_from_spec(spec)
    try:
      spec.loader.exec_module(module)
    except Exception as e:
      raise ConfigurationError(f"Failed to load extension file {self.extension_path}: {e}") from e
    return module

  def load(self) -> CommandRegistry:
    """
    Load the extension file, if there is one.

    Returns:
        CommandRegistry: Empty when no extension file exists

    Raises:
        ConfigurationError: If the file fails to import, or defines only one
          of clipboard_copy / clipboard_paste, or registers an incomplete
          clipboard provider
    """
    registry = CommandRegistry()
    if not self.extension_path.is_file():
      self.logger.debug(f"No extension file at {self.extension_path}")
      return registry

    module = self._import()

    register = getattr(module, "register", None)
    if callable(register):
      try:
        register(registry)
      except ConfigurationError:
        raise
      except Exception as e:
        raise ConfigurationError(f"register() in extension file {self.extension_path} failed: {e}") from e

    for attr, obj in vars(module).items():
      if attr.startswith(COMMAND_PREFIX) and callable(obj):
        name = attr[len(COMMAND_PREFIX) :]
        if name not in registry:
          registry.add_command(name, obj)

    copy_fn = getattr(module, "clipboard_copy", None)
    paste_fn = getattr(module, "clipboard_paste", None)
    notify_fn = getattr(module, "notify", None)

    if copy_fn is not None or paste_fn is not None:
      if not callable(copy_fn) or not callable(paste_fn):
        raise ConfigurationError(
          f"{self.extension_path} must define both clipboard_copy and clipboard_paste as callables"
        )
      registry.set_clipboard(FunctionClipboard(copy_fn, paste_fn))
    if callable(notify_fn) and registry.notifier is None:
      registry.set_notifier(notify_fn)

    self.logger.info(f"Loaded {len(registry.commands)} extension command(s) from {self.extension_path}")
    return registry
