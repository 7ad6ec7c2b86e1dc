"""
/**
 * @file concurrency.py
 * @summary Structured join for independent async branches.
 *
 * @details
 * - gather_settled runs awaitables concurrently and returns one Settled per
 *   branch, in submission order, holding either a value or the exception.
 * - Cancellation is never swallowed: a CancelledError (or any other
 *   BaseException) in a branch is re-raised.
 */
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, List, Optional


@dataclass
class Settled:
    """
    /**
     * Outcome of one branch of gather_settled.
     */
    """
    value: Any = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap_or(self, default: Any) -> Any:
        return self.value if self.error is None else default


async def gather_settled(*awaitables: Awaitable[Any]) -> List[Settled]:
    """
    /**
     * Await all branches concurrently; failures are captured per branch.
     */
    """
    results = await asyncio.gather(*awaitables, return_exceptions=True)
    settled: List[Settled] = []
    for result in results:
        if isinstance(result, Exception):
            settled.append(Settled(error=result))
        elif isinstance(result, BaseException):
            raise result
        else:
            settled.append(Settled(value=result))
    return settled


async def run_in_batches(factories, batch_size: int = 5) -> List[Settled]:
    """
    /**
     * Run coroutine factories in sequential batches of bounded size.
     *
     * @param factories: Iterable of zero-argument callables returning awaitables.
     * @param batch_size: Maximum number of concurrent calls per batch.
     * @return Settled results, batch by batch in submission order.
     */
    """
    factories = list(factories)
    settled: List[Settled] = []
    for start in range(0, len(factories), batch_size):
        batch = factories[start:start + batch_size]
        settled.extend(await gather_settled(*(factory() for factory in batch)))
    return settled
