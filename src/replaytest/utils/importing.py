"""Utility helpers for dynamic imports."""
from __future__ import annotations

import importlib
import importlib.util
import sys
from pathlib import Path
from typing import Any


def import_string(path: str) -> Any:
    """Import ``pkg.mod:harness`` or ``pkg.mod.harness``.

    After a colon the attribute may itself be dotted (``pkg.mod:Suite.harness``).
    """

    module_name, _, attr_path = path.partition(":") if ":" in path else path.rpartition(".")
    if not module_name or not attr_path:
        raise ValueError(f"Expected 'module:attribute', got {path!r}")
    obj: Any = importlib.import_module(module_name)
    for part in attr_path.split("."):
        if not hasattr(obj, part):
            raise AttributeError(f"'{module_name}:{attr_path}' has no attribute '{part}'")
        obj = getattr(obj, part)
    return obj


def load_from_source(source: Path, attr: str) -> Any:
    """Load the attribute named ``attr`` from a Python file at ``source``."""

    path = source.expanduser().resolve()
    if not path.exists():
        raise FileNotFoundError(f"Suite source file not found: {path}")
    module_name = f"replaytest_suite_{path.stem}_{hash(str(path)) & 0xFFFF:x}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Unable to load module from {path}")
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    spec.loader.exec_module(module)
    if not hasattr(module, attr):
        raise AttributeError(f"'{attr}' not found in {path}")
    return getattr(module, attr)


def resolve_target(target: str) -> Any:
    """Resolve ``pkg.mod:attr``, ``pkg.mod.attr`` or ``path/to/file.py:attr``."""

    location, sep, attr = target.rpartition(":")
    if sep and location.endswith(".py"):
        return load_from_source(Path(location), attr)
    return import_string(target)
