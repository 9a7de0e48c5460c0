import asyncio
from typing import Awaitable, Callable, Optional
from loguru import logger


class SessionTimer:
    """
    Calls an async tick handler once per interval while running.

    pause() stops ticking and resume() starts again; cancel() stops for good.
    All three are safe to call repeatedly, including from inside the tick
    handler itself.
    """

    def __init__(self, on_tick: Callable[[], Awaitable[None]], interval: float = 1.0):
        self.on_tick = on_tick
        self.interval = interval
        self._task: Optional[asyncio.Task] = None
        self._cancelled = False

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            if self._cancelled or self._task is not asyncio.current_task():
                return
            try:
                await self.on_tick()
            except Exception as e:
                logger.error(f"Session timer tick failed: {e}")

    def start(self) -> None:
        if self._cancelled or self.running:
            return
        self._task = asyncio.create_task(self._run())

    def _stop_task(self) -> None:
        task, self._task = self._task, None
        # A task cannot cancel itself mid-tick; it exits on its next wake-up instead.
        if task is not None and task is not asyncio.current_task():
            task.cancel()

    def pause(self) -> None:
        self._stop_task()

    def resume(self) -> None:
        self.start()

    def cancel(self) -> None:
        self._cancelled = True
        self._stop_task()
