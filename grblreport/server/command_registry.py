"""
Query command registration with decorator support.

Command classes register themselves with @register_command and are
discovered by importing every module of the grblreport.commands package.
dispatch_line() is the entry point the line reader calls for each
received line.
"""

from __future__ import annotations

import logging
import pkgutil
import time
from collections.abc import Callable
from importlib import import_module
from typing import TYPE_CHECKING

from grblreport.commands.base import QueryCommand
from grblreport.config import TRACE

if TYPE_CHECKING:
    from grblreport.server.reporter import Reporter

logger = logging.getLogger(__name__)


class CommandRegistry:
    """
    Singleton registry for query command classes.

    Names are the exact system command text ("$G", "?"); lookup is
    case-insensitive.
    """

    _instance: CommandRegistry | None = None
    _commands: dict[str, type[QueryCommand]] = {}
    _discovered: bool = False

    def __new__(cls) -> CommandRegistry:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if not hasattr(self, "_initialized"):
            self._commands = {}
            self._discovered = False
            self._initialized = True

    def register(self, name: str, command_class: type[QueryCommand]) -> None:
        """
        Register a command class with the given name.

        Raises:
            ValueError: If the name is already taken by another class
        """
        key = name.upper()
        existing = self._commands.get(key)
        if existing is not None:
            if existing is not command_class:
                raise ValueError(
                    f"Command '{name}' is already registered with class {existing.__name__}. "
                    f"Cannot register with {command_class.__name__}"
                )
            return
        self._commands[key] = command_class
        logger.debug(f"Registered command '{key}' -> {command_class.__name__}")

    def get_command_class(self, name: str) -> type[QueryCommand] | None:
        if not self._discovered:
            self.discover_commands()
        return self._commands.get(name.upper())

    def list_registered_commands(self) -> list[str]:
        if not self._discovered:
            self.discover_commands()
        return sorted(self._commands.keys())

    def discover_commands(self) -> None:
        """Import all modules in grblreport.commands to run their decorators."""
        if self._discovered:
            return

        logger.debug("Discovering commands...")
        commands_package = import_module("grblreport.commands")
        for _importer, modname, ispkg in pkgutil.iter_modules(commands_package.__path__):
            if ispkg or modname == "base":
                continue
            full_module_name = f"grblreport.commands.{modname}"
            import_module(full_module_name)
            logger.debug(f"Imported command module: {full_module_name}")

        self._discovered = True
        logger.debug(f"Command discovery complete. {len(self._commands)} commands registered.")

    def create_command(self, line: str) -> QueryCommand | None:
        """Instantiate the command claiming this line, or None."""
        command_class = self.get_command_class(line.strip())
        if command_class is None:
            logger.log(TRACE, "match_unknown line=%r", line)
            return None
        command = command_class()
        if not command.match(line.strip()):
            return None
        return command

    def dispatch_line(self, reporter: Reporter, line: str) -> bool:
        """
        Answer a query line through the reporter.

        Returns False when the line is not a registered query so the caller
        can hand it to the G-code parser. A handled line gets exactly one
        ack unless the command is realtime.
        """
        command = self.create_command(line)
        if command is None:
            return False

        start_t = time.perf_counter()
        status = command.execute(reporter)
        if not command.realtime and status is not None:
            reporter.status_message(status)

        dur_ms = (time.perf_counter() - start_t) * 1000.0
        logger.log(TRACE, "dispatch name=%s dur_ms=%.2f", command._registered_name, dur_ms)
        return True


# Global registry instance
_registry = CommandRegistry()


def register_command(name: str) -> Callable[[type[QueryCommand]], type[QueryCommand]]:
    """
    Decorator to register a command class.

    Usage:
        @register_command("$G")
        class GcodeModesCommand(QueryCommand):
            ...
    """

    def decorator(cls: type[QueryCommand]) -> type[QueryCommand]:
        if not issubclass(cls, QueryCommand):
            raise TypeError(f"Class {cls.__name__} must inherit from QueryCommand")
        _registry.register(name, cls)
        cls._registered_name = name
        return cls

    return decorator


get_command_class = _registry.get_command_class
list_registered_commands = _registry.list_registered_commands
discover_commands = _registry.discover_commands
create_command = _registry.create_command
dispatch_line = _registry.dispatch_line
