"""Unit tests for BoundedFanOut."""

import asyncio

import pytest

from cloudbot.utils.fanout import BoundedFanOut


class _Fatal(Exception):
    pass


class TestBoundedFanOut:
    """Tests for BoundedFanOut.run."""

    @pytest.mark.asyncio
    async def test_results_keep_input_order(self) -> None:
        async def _square(n: int) -> int:
            await asyncio.sleep(0.01 * (5 - n))
            return n * n

        results = await BoundedFanOut(max_in_flight=5).run(_square, [1, 2, 3, 4])

        assert [r.item for r in results] == [1, 2, 3, 4]
        assert [r.value for r in results] == [1, 4, 9, 16]
        assert all(r.ok for r in results)

    @pytest.mark.asyncio
    async def test_concurrency_is_capped(self) -> None:
        in_flight = 0
        peak = 0

        async def _track(_: int) -> None:
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1

        await BoundedFanOut(max_in_flight=3).run(_track, range(12))

        assert peak == 3

    @pytest.mark.asyncio
    async def test_errors_are_captured_per_item(self) -> None:
        async def _maybe_fail(n: int) -> int:
            if n == 2:
                raise RuntimeError("boom")
            return n

        results = await BoundedFanOut().run(_maybe_fail, [1, 2, 3])

        assert [r.ok for r in results] == [True, False, True]
        assert isinstance(results[1].error, RuntimeError)

    @pytest.mark.asyncio
    async def test_timeout_is_captured_as_error(self) -> None:
        async def _slow(n: int) -> int:
            if n == 1:
                await asyncio.sleep(10)
            return n

        results = await BoundedFanOut(timeout=0.05).run(_slow, [0, 1])

        assert results[0].value == 0
        assert isinstance(results[1].error, TimeoutError)

    @pytest.mark.asyncio
    async def test_stop_on_propagates_and_cancels_pending(self) -> None:
        finished: list[int] = []

        async def _call(n: int) -> int:
            if n == 0:
                raise _Fatal("stop")
            await asyncio.sleep(0.2)
            finished.append(n)
            return n

        with pytest.raises(_Fatal):
            await BoundedFanOut(max_in_flight=5).run(_call, [0, 1, 2], stop_on=(_Fatal,))
        await asyncio.sleep(0.3)

        assert finished == []

    @pytest.mark.asyncio
    async def test_cancelling_caller_cancels_queued_calls(self) -> None:
        started: list[int] = []

        async def _slow(n: int) -> int:
            started.append(n)
            await asyncio.sleep(30)
            return n

        fanout = BoundedFanOut(max_in_flight=1, timeout=None)
        task = asyncio.create_task(fanout.run(_slow, [1, 2, 3]))
        while not started:
            await asyncio.sleep(0)

        task.cancel()
        done, _ = await asyncio.wait([task], timeout=1.0)
        await asyncio.sleep(0.05)

        assert task in done
        assert task.cancelled()
        assert started == [1]

    @pytest.mark.asyncio
    async def test_empty_input(self) -> None:
        async def _never(n: int) -> int:
            raise AssertionError("not called")

        assert await BoundedFanOut().run(_never, []) == []

    def test_rejects_zero_width(self) -> None:
        with pytest.raises(ValueError):
            BoundedFanOut(max_in_flight=0)
