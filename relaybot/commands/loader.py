"""Load command modules by import path."""

import importlib
import logging

from relaybot.commands.service import CommandService

logger = logging.getLogger(__name__)

DEFAULT_SETUP = "setup"


def load_command_modules(service: CommandService, paths: list[str]) -> int:
    """Import each path and call its setup function with the service.

    Paths are ``package.module`` (calls ``setup``) or
    ``package.module:function``.

    Args:
        service: Service the modules register their commands on.
        paths: Import paths from configuration.

    Returns:
        Number of modules loaded.

    Raises:
        ImportError: If a module cannot be imported.
        AttributeError: If the setup function does not exist.
    """
    for path in paths:
        module_name, _, func_name = path.partition(":")
        module = importlib.import_module(module_name)
        setup = getattr(module, func_name or DEFAULT_SETUP)
        setup(service)
        logger.info(f"Loaded command module: {path}")
    return len(paths)
