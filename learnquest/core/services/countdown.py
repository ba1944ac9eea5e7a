"""Background countdown that ticks a quiz session once per second."""

from __future__ import annotations

import logging
from threading import Lock, Timer
from typing import Callable

from learnquest.constants.quiz_constants import TIMER_TICK_SECONDS

logger = logging.getLogger(__name__)


class Countdown:
    """Repeating timer that calls ``on_tick`` until it is cancelled.

    ``on_tick`` returns ``True`` to keep ticking and ``False`` to stop, which
    lets the owner stop the timer as soon as the session leaves the quiz.
    """

    def __init__(
        self,
        on_tick: Callable[[], bool],
        interval_seconds: float = TIMER_TICK_SECONDS,
        name: str = "QuizCountdown",
    ) -> None:
        self._on_tick = on_tick
        self._interval_seconds = interval_seconds
        self._name = name
        self._lock = Lock()
        self._timer: Timer | None = None
        self._cancelled = False

    def start(self) -> None:
        with self._lock:
            if self._cancelled or self._timer is not None:
                return
            self._schedule()

    def cancel(self) -> None:
        with self._lock:
            self._cancelled = True
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def is_running(self) -> bool:
        with self._lock:
            return self._timer is not None and not self._cancelled

    def _schedule(self) -> None:
        timer = Timer(self._interval_seconds, self._fire)
        timer.name = self._name
        timer.daemon = True
        self._timer = timer
        timer.start()

    def _fire(self) -> None:
        with self._lock:
            if self._cancelled:
                return
        try:
            keep_going = self._on_tick()
        except Exception:
            logger.exception("Countdown tick failed; stopping timer %s", self._name)
            keep_going = False
        with self._lock:
            if self._cancelled:
                return
            if keep_going:
                self._schedule()
            else:
                self._timer = None
                self._cancelled = True
