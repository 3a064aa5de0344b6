"""Bounded-concurrency execution of independent async operations."""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional

from .exceptions import ConfigurationError
from .logging_config import get_logger

logger = get_logger(__name__)


@dataclass(eq=False)
class Operation:
    """
    One unit of asynchronous work plus where it came from.

    ``start`` is called only when the executor admits the operation, so the
    work does not begin before a slot is free. Operations compare and hash
    by identity.
    """

    start: Callable[[], Awaitable[Any]]
    source: Optional[str] = None
    description: str = ""

    def __str__(self) -> str:
        return self.description or self.source or repr(self)


@dataclass(eq=False)
class OperationFailure:
    """An operation that raised or was cancelled."""

    operation: Operation
    error: Optional[BaseException] = None
    cancelled: bool = False


@dataclass
class _Window:
    limit: int
    in_flight: Dict["asyncio.Future[Any]", Operation] = field(default_factory=dict)
    failures: List[OperationFailure] = field(default_factory=list)

    @property
    def full(self) -> bool:
        return len(self.in_flight) >= self.limit

    def admit(self, operation: Operation) -> None:
        try:
            task = asyncio.ensure_future(operation.start())
        except Exception as error:
            # Raised, or returned something that is not awaitable.
            self.failures.append(OperationFailure(operation, error=error))
            return
        self.in_flight[task] = operation

    def settle(self, finished: Iterable["asyncio.Future[Any]"]) -> None:
        for task in finished:
            operation = self.in_flight.pop(task)
            if task.cancelled():
                self.failures.append(OperationFailure(operation, cancelled=True))
                continue
            error = task.exception()
            if error is not None:
                self.failures.append(OperationFailure(operation, error=error))


async def throttle_work(
    max_concurrent: int, operations: Iterable[Operation]
) -> List[OperationFailure]:
    """
    Run every operation with at most ``max_concurrent`` in flight at once.

    Operations are admitted in input order; as soon as any in-flight operation
    finishes its slot goes to the next pending one. A failure never stops the
    others and is never raised here: every failed or cancelled operation is
    returned once all of them have finished. The returned list is unordered.

    Raises:
        ConfigurationError: If ``max_concurrent`` is lower than 1.
    """
    if max_concurrent < 1:
        raise ConfigurationError(
            f"max_concurrent must be at least 1, got {max_concurrent}"
        )

    window = _Window(limit=max_concurrent)
    admitted = 0

    for operation in operations:
        if window.full:
            done, _ = await asyncio.wait(
                window.in_flight, return_when=asyncio.FIRST_COMPLETED
            )
            window.settle(done)
        window.admit(operation)
        admitted += 1

    if window.in_flight:
        done, _ = await asyncio.wait(window.in_flight)
        window.settle(done)

    if admitted:
        logger.debug(
            f"Ran {admitted} operation(s) with limit {max_concurrent}: "
            f"{len(window.failures)} failed"
        )
    return window.failures


def run_throttled(
    max_concurrent: int, operations: Iterable[Operation]
) -> List[OperationFailure]:
    """
    Run operations under a concurrency ceiling from synchronous code.

    This is the synchronous wrapper that runs ``throttle_work`` in a fresh
    event loop.
    """
    return asyncio.run(throttle_work(max_concurrent, operations))
