"""Test registry public API."""
from .registry import TestRegistry

__all__ = ["TestRegistry"]
