"""Cancellable scheduled calls and a replace-on-reschedule debouncer."""

import sched
import time


class _Handle:
    def __init__(self, queue: sched.scheduler, event):
        self._queue = queue
        self._event = event

    def cancel(self):
        try:
            self._queue.cancel(self._event)
        except ValueError:
            pass  # already ran or cancelled


class LoopScheduler:
    """Runs delayed callbacks on the thread that drives it.

    Nothing runs in the background: callbacks fire only from run_pending()
    or run_until_idle(), so they never overlap the owner's own calls.
    """

    def __init__(self, timefunc=time.monotonic, delayfunc=time.sleep):
        self._queue = sched.scheduler(timefunc, delayfunc)

    def call_later(self, delay: float, callback):
        return _Handle(self._queue, self._queue.enter(delay, 0, callback))

    @property
    def idle(self) -> bool:
        return self._queue.empty()

    def run_pending(self):
        """Run every callback that is already due, without waiting."""
        self._queue.run(blocking=False)

    def run_until_idle(self):
        """Wait for and run callbacks until none are scheduled."""
        self._queue.run()


class Debouncer:
    """Runs `callback` once, `delay` seconds after the last schedule() call.

    Scheduling again before the delay has passed cancels the pending run
    and replaces it; runs are never queued.
    """

    def __init__(self, scheduler, delay: float, callback):
        self.scheduler = scheduler
        self.delay = delay
        self.callback = callback
        self._pending = None

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def schedule(self):
        self.cancel()
        self._pending = self.scheduler.call_later(self.delay, self._fire)

    def cancel(self):
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _fire(self):
        self._pending = None
        self.callback()
