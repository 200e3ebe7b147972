"""
Timers on a cooperative event loop.

Everything here talks to a "scheduler" with the tkinter shape:
``after(ms, fn) -> handle`` and ``after_cancel(handle)``. A ``tk.Tk`` root
works as-is; tests pass a fake.
"""

import datetime
import logging
import threading
import time

import pytz

from prayerclock import clock
from prayerclock.config import DEBOUNCE_MS
from prayerclock.errors import InvalidTimezoneError

logger = logging.getLogger(__name__)


class ScheduledTask:
    """A single pending callback that can be cancelled once."""

    def __init__(self, scheduler, delay_ms: int, fn):
        self._scheduler = scheduler
        self.delay_ms = delay_ms
        self._fn = fn
        self.cancelled = False
        self._handle = None

    def start(self):
        self._handle = self._scheduler.after(self.delay_ms, self._run)
        return self

    def _run(self):
        self._handle = None
        if not self.cancelled:
            self._fn()

    def cancel(self):
        self.cancelled = True
        if self._handle is not None:
            self._scheduler.after_cancel(self._handle)
            self._handle = None


class PeriodicTask:
    """Runs fn now and then roughly every period_ms, re-arming after each run."""

    def __init__(self, scheduler, period_ms: int, fn, align: bool = True):
        self._scheduler = scheduler
        self.period_ms = period_ms
        self._fn = fn
        self._align = align
        self._pending = None
        self.cancelled = False

    def _next_delay(self) -> int:
        if not self._align:
            return self.period_ms
        # land just after the next whole period so displayed seconds don't drift
        return self.period_ms - int(time.time() * 1000) % self.period_ms or self.period_ms

    def start(self):
        self._run()
        return self

    def _run(self):
        if self.cancelled:
            return
        try:
            self._fn()
        finally:
            if not self.cancelled:
                self._pending = ScheduledTask(self._scheduler, self._next_delay(), self._run).start()

    def cancel(self):
        self.cancelled = True
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None


class TaskSlot:
    """Holds at most one live task for a purpose; replacing always cancels the old one first."""

    def __init__(self, name: str):
        self.name = name
        self.task = None

    @property
    def active(self) -> bool:
        return self.task is not None and not self.task.cancelled

    def cancel(self):
        if self.task is not None:
            logger.debug("Cancelling %s task", self.name)
            self.task.cancel()
            self.task = None

    def replace(self, task):
        """Cancel the current task, then start `task` in its place."""
        self.cancel()
        self.task = task
        return task.start()


class Debouncer:
    """Fires the most recent trigger only after delay_ms of quiet."""

    def __init__(self, scheduler, delay_ms: int = DEBOUNCE_MS):
        self._scheduler = scheduler
        self.delay_ms = delay_ms
        self._slot = TaskSlot("debounce")

    @property
    def pending(self) -> bool:
        return self._slot.active

    def trigger(self, fn):
        def fire():
            self._slot.task = None
            fn()

        self._slot.replace(ScheduledTask(self._scheduler, self.delay_ms, fire))

    def cancel(self):
        self._slot.cancel()


class CountdownTicker:
    """
    Re-evaluates the schedule clock once per tick and reports a ClockState.

    The next prayer is cached between ticks and recomputed only once its
    countdown runs out; the active interval is recomputed on rollover and
    whenever the wall-clock minute changes.
    """

    def __init__(self, schedule, on_update, now_fn=datetime.datetime.now):
        self.schedule = schedule
        self._on_update = on_update
        self._now = now_fn
        self._next = None
        self._active = None
        self._minute = None

    def _refresh_all(self, now):
        self._next = clock.next_prayer(self.schedule, now)
        self._refresh_active(now)

    def _refresh_active(self, now):
        self._active = clock.active_interval(self.schedule, now)
        self._minute = (now.date(), now.hour, now.minute)

    def tick(self):
        now = self._now()
        if self._next is None or clock.seconds_until(self._next[1], now) <= 0:
            self._refresh_all(now)
            logger.debug("Next prayer is %s at %s", self._next[0], self._next[1])
        elif (now.date(), now.hour, now.minute) != self._minute:
            self._refresh_active(now)
        state = clock.state_for(self.schedule, now, self._next[0], self._next[1], self._active)
        self._on_update(state)
        return state


def resolve_timezone(name: str):
    try:
        return pytz.timezone(name)
    except (pytz.UnknownTimeZoneError, AttributeError, ValueError) as exc:
        raise InvalidTimezoneError(f"Unknown timezone {name!r}") from exc


def wall_clock_text(timezone_name=None, utc_now=None) -> str:
    """
    HH:MM:SS for the present instant in timezone_name.

    Raises InvalidTimezoneError for an unusable name; None means device-local.
    """
    if utc_now is None:
        utc_now = datetime.datetime.now(pytz.utc)
    if timezone_name is None:
        return utc_now.astimezone().strftime("%H:%M:%S")
    return utc_now.astimezone(resolve_timezone(timezone_name)).strftime("%H:%M:%S")


class WallClockTicker:
    """Renders the current time of day in the schedule's timezone, falling back to device time."""

    def __init__(self, timezone_name, on_update, utc_now_fn=None):
        self.timezone_name = timezone_name
        self._on_update = on_update
        self._utc_now = utc_now_fn or (lambda: datetime.datetime.now(pytz.utc))
        self._warned = False

    def tick(self):
        utc_now = self._utc_now()
        try:
            text = wall_clock_text(self.timezone_name, utc_now)
        except InvalidTimezoneError as exc:
            if not self._warned:
                logger.warning("%s, using device time", exc)
                self._warned = True
            text = wall_clock_text(None, utc_now)
        self._on_update(text)
        return text


class ThreadedRunner:
    """
    Runs a blocking call on a daemon thread and delivers the outcome on the
    event loop via scheduler.after(0, ...).
    """

    def __init__(self, scheduler):
        self._scheduler = scheduler

    def submit(self, fn, on_success, on_error):
        def work():
            try:
                result = fn()
            except Exception as exc:  # handed to on_error on the loop thread
                self._scheduler.after(0, lambda err=exc: on_error(err))
                return
            self._scheduler.after(0, lambda: on_success(result))

        t = threading.Thread(target=work, daemon=True)
        t.start()
        return t
