import logging
import threading
import time
from typing import Callable, Optional


class RoundTimer:
    """Advisory countdown for a room's drawing phase.

    - Broadcasts ``tick`` with the seconds left after every interval
    - Broadcasts ``round_timeout`` when the budget is used up, then stops
    - Never advances the phase or marks anyone done
    - ``cancel`` takes the room lock, so once it returns nothing more is emitted
    """

    def __init__(
        self,
        room_id: str,
        seconds: int,
        send: Callable[[str, dict, str], None],
        lock=None,
        interval: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
        spawn: Optional[Callable] = None,
        logger=None,
    ):
        self.room_id = room_id
        self.seconds = int(seconds)
        self.interval = interval
        self._send = send
        self._lock = lock or threading.RLock()
        self._sleep = sleep
        self._spawn = spawn
        self._cancelled = threading.Event()
        self.logger = logger or logging.getLogger(__name__)

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def start(self) -> None:
        self.logger.info(f"[timer-set] room={self.room_id} duration={self.seconds}s interval={self.interval}s")
        if self._spawn is None:
            self._run()
        else:
            self._spawn(self._run)

    def cancel(self) -> None:
        with self._lock:
            if not self._cancelled.is_set():
                self._cancelled.set()
                self.logger.info(f"[timer-cancel] room={self.room_id}")

    def _run(self) -> None:
        remaining = self.seconds
        while remaining > 0:
            self._sleep(self.interval)
            remaining -= 1
            with self._lock:
                if self._cancelled.is_set():
                    return
                self._send('tick', {'seconds_remaining': remaining}, self.room_id)
        with self._lock:
            if self._cancelled.is_set():
                return
            self._cancelled.set()
            self.logger.info(f"[timer-fire] room={self.room_id} round_timeout")
            self._send('round_timeout', {}, self.room_id)
