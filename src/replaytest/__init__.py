"""replaytest package initialization."""
from __future__ import annotations

import importlib
import logging
import os
from typing import List

from .core import Cookie, ResultRecorder, RunServices, TestMode
from .harness import Harness
from .version import __version__

__all__ = [
    "__version__",
    "Cookie",
    "Harness",
    "ResultRecorder",
    "RunServices",
    "TestMode",
    "bootstrap",
]

PLUGINS_ENV = "REPLAYTEST_PLUGINS"

logger = logging.getLogger(__name__)


def bootstrap(harness: Harness) -> List[str]:
    """Let plugin modules listed in ``REPLAYTEST_PLUGINS`` register cases.

    Each module may expose ``register(harness)``. A module is loaded at most
    once per harness. Returns the names of newly loaded modules.
    """

    plugin_env = os.environ.get(PLUGINS_ENV)
    if not plugin_env:
        return []
    loaded: List[str] = []
    for item in plugin_env.split(","):
        module_name = item.strip()
        if not module_name or module_name in harness.plugins:
            continue
        module = importlib.import_module(module_name)
        register = getattr(module, "register", None)
        if callable(register):
            register(harness)
        harness.plugins.add(module_name)
        loaded.append(module_name)
        logger.debug("Loaded plugin %s", module_name)
    return loaded
