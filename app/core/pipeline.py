"""Ordered, timed stage execution for the HRFlow orchestrations.

Each stage produces exactly one timeline entry. Non-fatal stages turn an
exception into a ``StageError`` and keep going; a fatal stage raises
``FatalOrchestrationError`` carrying the timeline recorded so far.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Generic, TypeVar

from app.core.errors import FatalOrchestrationError
from app.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass
class StageError:
    """One recorded non-fatal failure."""

    step: str
    error: str
    type: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data = {"step": self.step, "error": self.error}
        if self.type is not None:
            data["type"] = self.type
        return data


@dataclass
class TimelineEntry:
    step: str
    timestamp: str
    duration_ms: int
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class StageOutcome(Generic[T]):
    """Value produced by a stage plus any partial failures it collected."""

    value: T | None = None
    errors: list[StageError] = field(default_factory=list)
    details: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Stage:
    """Named step of an orchestration; `fn` receives the shared run state."""

    name: str
    fn: Callable[[dict[str, Any]], Awaitable[StageOutcome[Any]]]
    fatal: bool = False
    propagate: bool = False


@dataclass
class Timeline:
    """Accumulates timeline entries and errors for one orchestration run."""

    entries: list[TimelineEntry] = field(default_factory=list)
    errors: list[StageError] = field(default_factory=list)
    started_at: float = field(default_factory=time.perf_counter)

    def elapsed_ms(self) -> int:
        return int((time.perf_counter() - self.started_at) * 1000)

    def entries_as_dicts(self) -> list[dict[str, Any]]:
        return [entry.to_dict() for entry in self.entries]

    def errors_as_dicts(self) -> list[dict[str, Any]]:
        return [error.to_dict() for error in self.errors]

    async def run_stage(
        self,
        name: str,
        fn: Callable[[], Awaitable[StageOutcome[T]]],
        *,
        fatal: bool = False,
        propagate: bool = False,
    ) -> StageOutcome[T]:
        """
        Run one stage, time it, and record its timeline entry.

        Args:
            name: Timeline step name
            fn: Zero-argument coroutine factory returning a StageOutcome
            fatal: Whether an exception aborts the orchestration
            propagate: Re-raise the stage's own exception after recording it

        Returns:
            The stage outcome; an empty outcome when a non-fatal stage raised

        Raises:
            FatalOrchestrationError: If a fatal stage raised
            Exception: The stage's exception, unchanged, when propagate is set
        """
        start = time.perf_counter()
        logger.debug(f"Stage {name} started", extra={"step": name})
        try:
            outcome = await fn()
        except Exception as e:
            duration_ms = int((time.perf_counter() - start) * 1000)
            self.errors.append(StageError(step=name, error=str(e)))
            self.entries.append(
                TimelineEntry(
                    step=name,
                    timestamp=_now_iso(),
                    duration_ms=duration_ms,
                    details={"failed": True},
                )
            )
            logger.error(
                f"Stage {name} failed: {e}",
                extra={"step": name, "duration_ms": duration_ms, "fatal": fatal},
            )
            if propagate:
                raise
            if fatal:
                raise FatalOrchestrationError(
                    str(e),
                    step=name,
                    timeline=self.entries_as_dicts(),
                    errors=self.errors_as_dicts(),
                ) from e
            return StageOutcome()

        duration_ms = int((time.perf_counter() - start) * 1000)
        self.errors.extend(outcome.errors)
        self.entries.append(
            TimelineEntry(
                step=name,
                timestamp=_now_iso(),
                duration_ms=duration_ms,
                details=outcome.details,
            )
        )
        logger.info(
            f"Stage {name} completed in {duration_ms}ms",
            extra={"step": name, "duration_ms": duration_ms, "errors": len(outcome.errors)},
        )
        return outcome

    async def run_stages(self, stages: Iterable[Stage], state: dict[str, Any]) -> None:
        """Run stages in order; each stage's value is stored in state under its name."""
        for stage in stages:
            outcome = await self.run_stage(
                stage.name,
                lambda stage=stage: stage.fn(state),
                fatal=stage.fatal,
                propagate=stage.propagate,
            )
            state[stage.name] = outcome.value


async def gather_outcomes(
    keys: Iterable[str],
    coros: Iterable[Awaitable[T]],
) -> tuple[list[tuple[str, T]], list[tuple[str, BaseException]]]:
    """
    Run coroutines concurrently, isolating failures per task.

    Results are merged in submission order after every task has finished,
    so one rejected task never cancels or reorders its siblings.

    Returns:
        (successes, failures) as lists of (key, value) / (key, exception)
    """
    keys = list(keys)
    results = await asyncio.gather(*coros, return_exceptions=True)

    successes: list[tuple[str, T]] = []
    failures: list[tuple[str, BaseException]] = []
    for key, result in zip(keys, results, strict=True):
        if isinstance(result, BaseException):
            failures.append((key, result))
        else:
            successes.append((key, result))
    return successes, failures


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
