from collections import deque

from .state import ElectionEvent


class EventLog:
    """Most recent events first; the oldest fall off past `max_events`."""

    def __init__(self, max_events: int = 50):
        self._events: deque[ElectionEvent] = deque(maxlen=max_events)

    def append(self, event: ElectionEvent):
        self._events.appendleft(event)

    def extend(self, events):
        for e in events:
            self.append(e)

    def of_kind(self, kind) -> list[ElectionEvent]:
        return [e for e in self._events if e.kind is kind]

    def latest(self) -> ElectionEvent | None:
        return self._events[0] if self._events else None

    def __iter__(self):
        return iter(self._events)

    def __len__(self):
        return len(self._events)

    def to_list(self) -> list[ElectionEvent]:
        return list(self._events)
