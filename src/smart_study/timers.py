"""Focus (Pomodoro) countdown and break reminder.

Both are driven by threading.Timer at one-second resolution. FocusTimer.tick()
advances the countdown by one second and can be called directly, which is how
the tests drive it.
"""
import threading
from typing import Callable, Optional

DEFAULT_WORK_MINUTES = 25
DEFAULT_BREAK_MINUTES = 5


class FocusTimer:
    def __init__(
        self,
        on_tick: Optional[Callable[[int], None]] = None,
        on_complete: Optional[Callable[[], None]] = None,
        interval: float = 1.0,
    ):
        self.on_tick = on_tick
        self.on_complete = on_complete
        self.interval = interval
        self.work_minutes = DEFAULT_WORK_MINUTES
        self.break_minutes = DEFAULT_BREAK_MINUTES
        self.remaining_seconds = 0
        self.is_work_phase = True
        self.is_running = False
        self._timer: Optional[threading.Timer] = None
        self._lock = threading.Lock()

    def start(
        self,
        work_minutes: Optional[int] = None,
        break_minutes: Optional[int] = None,
        start_with_break: bool = False,
    ) -> None:
        self.stop()
        with self._lock:
            if work_minutes is not None:
                self.work_minutes = work_minutes
            if break_minutes is not None:
                self.break_minutes = break_minutes
            self.is_work_phase = not start_with_break
            self.remaining_seconds = (self.break_minutes if start_with_break else self.work_minutes) * 60
            self.is_running = True
            self._schedule()

    def stop(self) -> None:
        with self._lock:
            self._finish()

    def pause(self) -> None:
        with self._lock:
            self._cancel()
            self.is_running = False

    def resume(self) -> None:
        with self._lock:
            if self.is_running or self.remaining_seconds <= 0:
                return
            self.is_running = True
            self._schedule()

    def tick(self) -> None:
        """Advance one second, switching from work to break and then finishing."""
        with self._lock:
            remaining, phase_done = self._advance()
        self._notify(remaining, phase_done)

    def formatted_time(self) -> str:
        minutes, seconds = divmod(max(self.remaining_seconds, 0), 60)
        return f"{minutes:02d}:{seconds:02d}"

    def _advance(self) -> tuple[int, bool]:
        self.remaining_seconds -= 1
        remaining = self.remaining_seconds
        if remaining > 0:
            return remaining, False
        if self.is_work_phase:
            self.is_work_phase = False
            self.remaining_seconds = self.break_minutes * 60
        else:
            self._finish()
        return remaining, True

    def _notify(self, remaining: int, phase_done: bool) -> None:
        if self.on_tick:
            self.on_tick(remaining)
        if phase_done and self.on_complete:
            self.on_complete()

    def _finish(self) -> None:
        self._cancel()
        self.is_running = False
        self.remaining_seconds = 0

    def _schedule(self) -> None:
        self._timer = threading.Timer(self.interval, self._run)
        self._timer.daemon = True
        self._timer.start()

    def _run(self) -> None:
        # running check and countdown under one lock against a concurrent pause()
        with self._lock:
            if not self.is_running:
                return
            fired = self._timer
            remaining, phase_done = self._advance()
        self._notify(remaining, phase_done)
        with self._lock:
            # pause()/resume() during the callbacks replace self._timer
            if self.is_running and self._timer is fired:
                self._schedule()

    def _cancel(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None


class BreakReminder:
    """One-shot callback fired after `interval_minutes` of study."""

    def __init__(self, interval_minutes: int = DEFAULT_WORK_MINUTES, break_minutes: int = DEFAULT_BREAK_MINUTES):
        self.interval_minutes = interval_minutes
        self.break_minutes = break_minutes
        self._timer: Optional[threading.Timer] = None

    @property
    def is_pending(self) -> bool:
        return self._timer is not None and self._timer.is_alive()

    def start(self, on_reminder: Callable[[], None], delay_seconds: Optional[float] = None) -> None:
        self.stop()
        delay = self.interval_minutes * 60 if delay_seconds is None else delay_seconds
        self._timer = threading.Timer(delay, on_reminder)
        self._timer.daemon = True
        self._timer.start()

    def stop(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def message(self) -> str:
        return (
            f"You've been studying for {self.interval_minutes} minutes. "
            f"Take a {self.break_minutes} minute break to stay refreshed."
        )
