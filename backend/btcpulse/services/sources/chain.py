"""
Source Chain

Ordered "first valid source wins" executor shared by the price, history and
derivatives acquirers.

Attempts run strictly in sequence. An attempt that raises, times out or
fails validation is logged and skipped; it is never retried. Nothing raised
by an attempt escapes run().
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Generic, Optional, Sequence, TypeVar, Union

from btcpulse.services.base import ServiceError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class SourceAttempt(Generic[T]):
    """A named, zero-argument coroutine factory."""

    name: str
    fetch: Callable[[], Awaitable[T]]
    # Optional sources log failures at DEBUG instead of WARNING
    optional: bool = False


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T
    source: str


@dataclass(frozen=True)
class Failed:
    reason: str
    attempts: dict[str, str] = field(default_factory=dict)


SourceResult = Union[Ok[T], Failed]


class SourceChain(Generic[T]):
    """
    Run attempts in priority order until one produces a valid value.

    Args:
        name: Chain name for logging ("price", "history", ...)
        attempts: Sources ordered by trust/cost, best first
        validator: Predicate applied to each result; False means skip
        timeout: Per-attempt timeout in seconds (None = unbounded)
    """

    def __init__(
        self,
        name: str,
        attempts: Sequence[SourceAttempt[T]],
        validator: Optional[Callable[[T], bool]] = None,
        timeout: Optional[float] = None,
    ):
        self.name = name
        self.attempts = list(attempts)
        self.validator = validator
        self.timeout = timeout

    async def run(self) -> SourceResult[T]:
        failures: dict[str, str] = {}

        for attempt in self.attempts:
            log = logger.debug if attempt.optional else logger.warning
            try:
                value = await asyncio.wait_for(attempt.fetch(), timeout=self.timeout)
            except asyncio.TimeoutError:
                failures[attempt.name] = f"timed out after {self.timeout}s"
                log(f"[{self.name}] {attempt.name} timed out")
                continue
            except ServiceError as e:
                failures[attempt.name] = e.message
                log(f"[{self.name}] {attempt.name} failed: {e.message}")
                continue
            except Exception as e:
                failures[attempt.name] = f"{type(e).__name__}: {e}"
                logger.warning(
                    f"[{self.name}] {attempt.name} raised unexpectedly", exc_info=True
                )
                continue

            if self.validator is not None and not self.validator(value):
                failures[attempt.name] = "failed validation"
                log(f"[{self.name}] {attempt.name} returned an invalid value")
                continue

            logger.info(f"[{self.name}] using {attempt.name}")
            return Ok(value=value, source=attempt.name)

        logger.error(f"[{self.name}] all sources failed: {failures}")
        return Failed(reason=f"all {len(self.attempts)} sources failed", attempts=failures)
