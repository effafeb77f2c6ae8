import heapq
import itertools


class SimClock:
    """
    Discrete-event clock in simulated milliseconds.

    Periodic timers re-arm after each firing; one-shot actions fire once.
    Entries due at the same instant fire in the order they were scheduled.
    Only one action runs at a time, so callbacks never interleave.
    """

    def __init__(self, start: float = 0.0):
        self.now = float(start)
        self._queue = []
        self._seq = itertools.count()
        self._timers = {}  # name -> (period, callback, generation)
        self._generation = itertools.count()

    def call_later(self, delay: float, callback):
        heapq.heappush(self._queue, (self.now + delay, next(self._seq), None, None, callback))

    def every(self, name: str, period: float, callback):
        if period <= 0:
            raise ValueError(f"timer period must be positive, got {period}")
        gen = next(self._generation)
        self._timers[name] = (period, callback, gen)
        heapq.heappush(self._queue, (self.now + period, next(self._seq), name, gen, callback))

    def cancel(self, name: str):
        self._timers.pop(name, None)

    def is_armed(self, name: str) -> bool:
        return name in self._timers

    def advance(self, duration: float):
        self.run_until(self.now + duration)

    def run_until(self, until: float):
        while self._queue and self._queue[0][0] <= until:
            due, _, name, gen, callback = heapq.heappop(self._queue)
            if not self._live((due, None, name, gen, callback)):
                continue
            self.now = due
            if name is not None:
                period = self._timers[name][0]
                heapq.heappush(self._queue, (due + period, next(self._seq), name, gen, callback))
            callback(due)
        self.now = max(self.now, until)

    def _live(self, entry) -> bool:
        _, _, name, gen, _ = entry
        if name is None:
            return True
        timer = self._timers.get(name)
        return timer is not None and timer[2] == gen
