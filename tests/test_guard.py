from __future__ import annotations

import asyncio
import unittest

from jsonconfig import CancellationToken, OperationCancelled, OperationGuard


class OperationGuardTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.guard = OperationGuard(poll_seconds=0.01)

    def tearDown(self) -> None:
        self.guard.close()

    async def test_async_acquire_when_free(self) -> None:
        async with self.guard.acquire_async():
            self.assertTrue(self.guard.locked())
        self.assertFalse(self.guard.locked())

    async def test_async_waiter_runs_after_blocking_holder(self) -> None:
        order = []

        async def waiter() -> None:
            async with self.guard.acquire_async():
                order.append("async")

        with self.guard:
            task = asyncio.create_task(waiter())
            await asyncio.sleep(0.05)
            order.append("sync")
        await asyncio.wait_for(task, 5)
        self.assertEqual(order, ["sync", "async"])
        self.assertFalse(self.guard.locked())

    async def test_pre_cancelled_token_raises(self) -> None:
        token = CancellationToken()
        token.cancel()
        with self.assertRaises(OperationCancelled):
            async with self.guard.acquire_async(token):
                self.fail("guard should not be entered")
        self.assertFalse(self.guard.locked())

    async def test_token_cancelled_while_waiting(self) -> None:
        token = CancellationToken()

        async def waiter() -> None:
            async with self.guard.acquire_async(token):
                self.fail("guard should not be entered")

        with self.guard:
            task = asyncio.create_task(waiter())
            await asyncio.sleep(0.05)
            token.cancel()
            with self.assertRaises(OperationCancelled):
                await asyncio.wait_for(task, 5)
        self.assertFalse(self.guard.locked())

    async def test_abandoned_acquisition_is_released(self) -> None:
        async def waiter() -> None:
            async with self.guard.acquire_async():
                self.fail("guard should not be entered")

        with self.guard:
            task = asyncio.create_task(waiter())
            await asyncio.sleep(0.05)
            task.cancel()
            with self.assertRaises(asyncio.CancelledError):
                await task

        async def reacquire() -> None:
            async with self.guard.acquire_async():
                pass

        await asyncio.wait_for(reacquire(), 5)


if __name__ == "__main__":
    unittest.main()
