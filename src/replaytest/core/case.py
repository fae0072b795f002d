"""Immutable test-case definition."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional, Tuple

from .models import Event, TestMode, split_name
from .results import ResultRecorder
from .services import RunServices

CompletionCallback = Callable[[], None]
TestBody = Callable[..., None]


@dataclass(frozen=True)
class TestCase:
    """A named body plus its execution mode.

    Sync bodies are called as ``body(recorder)``. Async bodies are called as
    ``body(recorder, done)`` and must call ``done()`` exactly once. A body that
    never calls it stalls the run; calling it twice is undefined.
    """

    __test__ = False

    name: str
    body: TestBody
    mode: TestMode = TestMode.SYNC
    group_path: Tuple[str, ...] = field(init=False)
    short_name: str = field(init=False)

    def __post_init__(self) -> None:
        group_path, short_name = split_name(self.name)
        object.__setattr__(self, "group_path", group_path)
        object.__setattr__(self, "short_name", short_name)

    @property
    def is_async(self) -> bool:
        return self.mode is TestMode.ASYNC

    def run(
        self,
        on_event: Callable[[Event], None],
        on_complete: CompletionCallback,
        on_exception: Callable[[BaseException], None],
        stop_at_offset: Optional[int] = None,
        *,
        services: RunServices,
    ) -> None:
        """Execute the body once on a later scheduler turn.

        Exactly one of ``on_complete``/``on_exception`` follows, never from
        within this call.
        """

        recorder = ResultRecorder(
            self,
            on_event,
            on_exception,
            stop_at_offset,
            breakpoints=services.breakpoints,
            id_factory=services.id_factory,
            opaque_types=services.opaque_types,
        )

        def invoke() -> None:
            try:
                if self.is_async:
                    self.body(recorder, on_complete)
                else:
                    self.body(recorder)
            except Exception as exc:
                on_exception(exc)
                return
            if not self.is_async:
                on_complete()

        services.scheduler.schedule(invoke)
