"""Platform collaborators used by the engine: scheduling, ids and breakpoints."""
from __future__ import annotations

import asyncio
import logging
import sys
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Protocol, Set, Type

logger = logging.getLogger(__name__)

# A debugger that returns faster than this was never really attached.
BREAKPOINT_ATTACH_THRESHOLD_S = 0.1


class Scheduler(Protocol):
    def schedule(self, fn: Callable[[], None]) -> None:
        """Invoke ``fn`` on a later turn, FIFO per caller."""


class BreakpointTrigger(Protocol):
    def request_break(self, context: object) -> None:
        """Ask for an interactive break; may do nothing."""


class LoopScheduler:
    """Defers work onto an asyncio event loop with ``call_soon``.

    Without an explicit loop the currently running loop is used, so the
    scheduler must then be driven from inside that loop (see
    :func:`run_to_completion`).
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    def schedule(self, fn: Callable[[], None]) -> None:
        loop = self._loop or asyncio.get_running_loop()
        loop.call_soon(fn)


class InteractiveBreakpoint:
    """Drops into the configured debugger via the ``breakpoint()`` builtin."""

    def __init__(self, *, threshold_s: float = BREAKPOINT_ATTACH_THRESHOLD_S) -> None:
        self._threshold_s = threshold_s

    def request_break(self, context: object) -> None:
        if not _stdin_is_interactive():
            logger.warning("Breakpoint requested for %s but stdin is not a terminal; continuing", context)
            return
        started = time.perf_counter()
        breakpoint()  # noqa: T100 - debug-to-failure entry point
        if time.perf_counter() - started < self._threshold_s:
            logger.warning(
                "Breakpoint for %s returned immediately; attach a debugger "
                "(check PYTHONBREAKPOINT) to use this feature",
                context,
            )


class NullBreakpoint:
    def request_break(self, context: object) -> None:
        logger.debug("Breakpoint suppressed for %s", context)


def new_run_id() -> str:
    return uuid.uuid4().hex


@dataclass
class RunServices:
    """Collaborators handed to every test-case execution."""

    scheduler: Scheduler = field(default_factory=LoopScheduler)
    breakpoints: BreakpointTrigger = field(default_factory=InteractiveBreakpoint)
    id_factory: Callable[[], str] = new_run_id
    # Compared by identity in ``equal``; see ``Harness.register_opaque_type``.
    opaque_types: Set[Type[Any]] = field(default_factory=set)


def run_to_completion(start: Callable[[Callable[[], None]], None]) -> None:
    """Run ``start(on_complete)`` inside a fresh event loop until it calls back.

    An exception escaping any callback on the loop is re-raised here instead
    of being lost. Blocks forever if the started work never completes, e.g. an
    async test body that never calls its completion callback.
    """

    async def _drive() -> None:
        loop = asyncio.get_running_loop()
        done = loop.create_future()

        def _on_complete() -> None:
            if not done.done():
                done.set_result(None)

        def _on_loop_error(loop: asyncio.AbstractEventLoop, context: Dict[str, Any]) -> None:
            error = context.get("exception")
            if error is None or done.done():
                loop.default_exception_handler(context)
                return
            done.set_exception(error)

        loop.set_exception_handler(_on_loop_error)
        start(_on_complete)
        await done

    asyncio.run(_drive())


def _stdin_is_interactive() -> bool:
    stream = sys.stdin
    try:
        return bool(stream) and stream.isatty()
    except ValueError:  # closed stream
        return False
