"""Errors raised to callers of the registry and run entry points."""
from __future__ import annotations


class ConfigurationError(Exception):
    """Base class for errors fatal to the call that triggered them."""


class DuplicateTestError(ConfigurationError, ValueError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Every test needs a unique name, but there are two tests named '{name}'")
        self.name = name


class UnknownTestError(ConfigurationError, LookupError):
    def __init__(self, name: str) -> None:
        super().__init__(f"No such test '{name}'")
        self.name = name
