"""
Runs the async service layer on one background event loop so that
synchronous Flask views can call it.
"""
import asyncio
import threading


class AsyncRunner:
    """
    Usage:
        runner = AsyncRunner()
        record = runner.run(controller.add(data))
        runner.stop()
    """

    def __init__(self):
        self.loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._serve, name='classroom-loop', daemon=True)
        self._thread.start()

    def _serve(self):
        asyncio.set_event_loop(self.loop)
        self.loop.run_forever()

    def run(self, coro, timeout=None):
        """Block until coro finishes on the loop; its exception is re-raised here"""
        future = asyncio.run_coroutine_threadsafe(coro, self.loop)
        return future.result(timeout)

    def call(self, func, *args, **kwargs):
        """Run a plain function on the loop thread (for loop-bound state)"""
        async def wrapper():
            return func(*args, **kwargs)
        return self.run(wrapper())

    def stop(self):
        if self.loop.is_running():
            self.loop.call_soon_threadsafe(self.loop.stop)
            self._thread.join(timeout=5)
