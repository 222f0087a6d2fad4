"""Bounded concurrent fan-out for read-only queries.

Shared by the price optimizer and the capacity probe so that every
provider API sees at most ``max_in_flight`` simultaneous requests.
"""

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")
R = TypeVar("R")


@dataclass(frozen=True)
class FanOutResult(Generic[T, R]):
    """Outcome of one fanned-out call."""

    item: T
    value: R | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class BoundedFanOut:
    """Run one coroutine per item with a concurrency cap and per-call timeout.

    Failures and timeouts are captured per item. Exceptions listed in
    ``stop_on`` abort the whole fan-out: pending calls are cancelled and the
    exception propagates. Cancelling the caller cancels every pending call
    without waiting on it.
    """

    def __init__(self, max_in_flight: int = 5, timeout: float | None = 10.0) -> None:
        if max_in_flight < 1:
            raise ValueError("max_in_flight must be at least 1")
        self._max_in_flight = max_in_flight
        self._timeout = timeout

    @property
    def max_in_flight(self) -> int:
        return self._max_in_flight

    async def run(
        self,
        func: Callable[[T], Awaitable[R]],
        items: Iterable[T],
        *,
        stop_on: tuple[type[Exception], ...] = (),
    ) -> list[FanOutResult[T, R]]:
        """Apply ``func`` to every item; results come back in input order.

        Args:
            func: Coroutine function called once per item
            items: Inputs to fan out
            stop_on: Exception types that abort the whole run

        Returns:
            One FanOutResult per item, holding its value or its error
        """
        semaphore = asyncio.Semaphore(self._max_in_flight)

        async def _call(item: T) -> FanOutResult[T, R]:
            async with semaphore:
                try:
                    if self._timeout is None:
                        value = await func(item)
                    else:
                        value = await asyncio.wait_for(func(item), timeout=self._timeout)
                except stop_on:
                    raise
                except Exception as exc:  # noqa: BLE001
                    return FanOutResult(item=item, error=exc)
                return FanOutResult(item=item, value=value)

        tasks = [asyncio.create_task(_call(item)) for item in items]
        if not tasks:
            return []
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            raise
