"""Process entry point: registration and execution API."""
from __future__ import annotations

from typing import Any, Callable, Mapping, Optional, Set, Type, Union

from replaytest.core import Cookie, ReportSink, RunServices, TestCase, TestMode, run_to_completion
from replaytest.registry import TestRegistry

CookieLike = Union[Cookie, Mapping[str, Any]]


class Harness:
    """Owns one registry and the collaborators used to run it.

    Harnesses are independent; tests of the engine itself build a fresh one
    per test.
    """

    def __init__(
        self,
        services: Optional[RunServices] = None,
        registry: Optional[TestRegistry] = None,
    ) -> None:
        self.services = services or RunServices()
        self.registry = registry if registry is not None else TestRegistry()
        self.plugins: Set[str] = set()

    def add(self, name: str, body: Optional[Callable[..., None]] = None) -> Any:
        """Register a sync case; ``@harness.add("group - name")`` also works."""

        return self._register(name, body, TestMode.SYNC)

    def add_async(self, name: str, body: Optional[Callable[..., None]] = None) -> Any:
        """Register a case whose body receives ``(recorder, done)``."""

        return self._register(name, body, TestMode.ASYNC)

    def register_opaque_type(self, kind: Type[Any]) -> Type[Any]:
        """Compare instances of ``kind`` by identity in this harness; usable as a class decorator."""

        self.services.opaque_types.add(kind)
        return kind

    def run_all(self, on_report: ReportSink, on_complete: Callable[[], None]) -> None:
        self.registry.create_run(on_report, self.services).run(on_complete)

    def debug_one(
        self,
        cookie: CookieLike,
        on_report: ReportSink,
        on_complete: Callable[[], None],
    ) -> None:
        self.registry.create_run(on_report, self.services).debug(_as_cookie(cookie), on_complete)

    def run(self, on_report: ReportSink) -> None:
        """Blocking :meth:`run_all` on a fresh event loop."""

        run_to_completion(lambda done: self.run_all(on_report, done))

    def debug(self, cookie: CookieLike, on_report: ReportSink) -> None:
        """Blocking :meth:`debug_one` on a fresh event loop."""

        resolved = _as_cookie(cookie)
        self.registry.get(resolved.name)
        run_to_completion(lambda done: self.debug_one(resolved, on_report, done))

    def _register(self, name: str, body: Optional[Callable[..., None]], mode: TestMode) -> Any:
        if body is not None:
            self.registry.add_case(TestCase(name=name, body=body, mode=mode))
            return body

        def decorator(func: Callable[..., None]) -> Callable[..., None]:
            self.registry.add_case(TestCase(name=name, body=func, mode=mode))
            return func

        return decorator


def _as_cookie(cookie: CookieLike) -> Cookie:
    if isinstance(cookie, Cookie):
        return cookie
    return Cookie.from_mapping(cookie)
