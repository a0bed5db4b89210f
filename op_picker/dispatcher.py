"""
op-picker - Command Dispatcher

Resolves a command name to a built-in handler or an extension command.
Built-ins are looked up first and cannot be overridden by extensions.
"""

import argparse
import sys
from pathlib import Path
from typing import Optional

from .core.clipboard import ClipboardError
from .core.common_utils import UtilsError
from .core.selector import SelectorError
from .managers.app_manager import AppManager
from .managers.common_config import CommonConfigError, session_file_from_env
from .managers.extension_manager import CommandContext, CommandRegistry, ExtensionCommand
from .secret_managers.base import AuthenticationError, ConfigurationError, SecretManagerError
from .secret_managers.factory import FactoryConfigError

PROG = "op-picker"

LIST_ALIASES = ("", "-c", "--choose")
HELP_ALIASES = ("help", "usage", "-h", "--help")
BUILTIN_COMMANDS = ("list", "signin", "clear", *HELP_ALIASES)

USAGE = f"""\
usage: {PROG} [--debug] [--version] [COMMAND] [ARGS...]

Pick a 1Password item with fzf and copy its secret to the clipboard for a
limited time, then put the previous clipboard content back.

commands:
  list [-c|--choose]   pick an item and copy its secret (default command)
                       --choose always asks which field to copy
  signin [-f|--force]  sign in and cache the session (--force: sign in again)
  clear                remove the cached session
  help                 show this help

environment:
  OP_PICKER_SESSION_FILE    session cache (default ~/.config/op-picker/session)
  OP_PICKER_EXTENSION_FILE  extension file (default ~/.config/op-picker/extensions.py)
  OP_PICKER_CLIP_TIME       how long the secret stays on the clipboard (default 15s)
"""

CONFIG_ERRORS = (ConfigurationError, CommonConfigError, FactoryConfigError, UtilsError)
RUNTIME_ERRORS = (SelectorError, ClipboardError, SecretManagerError)


def _exit_code(exit_exc: SystemExit) -> int:
  code = exit_exc.code
  if code is None:
    return 0
  if isinstance(code, int):
    return code
  print(code, file=sys.stderr)
  return 1


class CommandDispatcher:
  def __init__(self, app: AppManager) -> None:
    self.app = app
    self.logger = app.get_logger("dispatcher", "dispatcher")

  def _split(self, argv: list[str]) -> tuple[str, list[str]]:
    """Return the command name and its arguments, applying the list aliases."""
    if not argv or argv[0] == "":
      return "list", argv[1:]
    if argv[0] in LIST_ALIASES:
      return "list", argv
    return argv[0], argv[1:]

  def _load_extensions(self, command: str) -> tuple[CommandRegistry, Optional[Exception]]:
    try:
      return self.app.extensions, None
    except CONFIG_ERRORS as e:
      # clear and help never touch the store or the clipboard
      if command == "clear" or command in HELP_ALIASES:
        self.logger.warning(f"Ignoring extension error for '{command}': {e}")
        return CommandRegistry(), e
      raise

  def dispatch(self, argv: list[str]) -> int:
    """
    Run one command.

    Args:
        argv: Command line without the program name

    Returns:
        int: Process exit status
    """
    command, args = self._split(argv)
    self.logger.debug(f"Dispatching command '{command}'")

    try:
      registry, load_error = self._load_extensions(command)

      if command == "list":
        return self.run_list(args)
      if command == "signin":
        return self.run_signin(args)
      if command == "clear":
        return self.run_clear()
      if command in HELP_ALIASES:
        return self.run_help(registry, load_error)

      extension = registry.get(command)
      if extension is not None:
        return self.run_extension(extension, args)

      print(f"{PROG}: unknown command '{command}'. Run '{PROG} help' for usage.", file=sys.stderr)
      return 1

    except AuthenticationError as e:
      self.logger.error(f"Authentication failed: {e}")
      print(f"❌ Authentication failed: {e}", file=sys.stderr)
      return 1
    except CONFIG_ERRORS as e:
      self.logger.error(f"Configuration error: {e}")
      print(f"❌ Configuration error: {e}", file=sys.stderr)
      return 1
    except RUNTIME_ERRORS as e:
      self.logger.error(f"Command '{command}' failed: {e}")
      print(f"❌ {e}", file=sys.stderr)
      return 1
    except SystemExit as e:
      return _exit_code(e)
    except KeyboardInterrupt:
      return 130
    except Exception as e:
      self.logger.error(f"Unexpected error in command '{command}': {e}", exc_info=True)
      print(f"❌ Command '{command}' failed: {e}", file=sys.stderr)
      return 1

  def run_list(self, args: list[str]) -> int:
    parser = argparse.ArgumentParser(prog=f"{PROG} list", add_help=False)
    parser.add_argument("-c", "--choose", action="store_true", help="Always choose the field")
    opts = parser.parse_args(args)

    # A missing clipboard fails here, before anything is fetched
    exchange = self.app.new_exchange()
    token = self.app.session_manager.ensure_session()
    with exchange:
      value = self.app.secret_resolver.resolve(token, choose=opts.choose)
      if value is None:
        self.logger.info("Nothing selected")
        return 0
      exchange.expose(value)
    return 0

  def run_signin(self, args: list[str]) -> int:
    parser = argparse.ArgumentParser(prog=f"{PROG} signin", add_help=False)
    parser.add_argument("-f", "--force", action="store_true", help="Sign in even if the session is valid")
    opts = parser.parse_args(args)

    self.app.session_manager.ensure_session(force=opts.force)
    print("✅ Signed in")
    return 0

  def run_clear(self) -> int:
    try:
      self.app.session_manager.clear()
    except CONFIG_ERRORS as e:
      # The session path does not depend on the secret store; drop it directly.
      self.logger.warning(f"Clearing session without secret store: {e}")
      Path(session_file_from_env()).expanduser().unlink(missing_ok=True)
    return 0

  def run_help(self, registry: CommandRegistry, load_error: Optional[Exception] = None) -> int:
    print(USAGE, end="")
    if registry.commands:
      print("\nextension commands:")
      width = max(len(name) for name in registry.commands)
      for name, command in sorted(registry.commands.items()):
        shadowed = "  (shadowed by built-in)" if name in BUILTIN_COMMANDS else ""
        print(f"  {name.ljust(width)}  {command.help}{shadowed}".rstrip())
    if load_error is not None:
      print(f"\n⚠️  Extensions not loaded: {load_error}", file=sys.stderr)
    return 0

  def run_extension(self, extension: ExtensionCommand, args: list[str]) -> int:
    exchange = self.app.new_exchange()
    token = self.app.session_manager.ensure_session() if extension.requires_session else None
    with exchange:
      result = extension.handler(CommandContext(args=args, token=token, app=self.app, exchange=exchange))
    return int(result or 0)
