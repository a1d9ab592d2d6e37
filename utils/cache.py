"""Small time-to-live cache handed to the catalog client instead of module-level dicts."""

import time


class TTLCache:
    """Key -> (stored_at, value) store that forgets entries older than ``ttl_seconds``.

    A ttl of zero or less keeps entries forever. ``clock`` defaults to
    ``time.time`` and can be swapped for a fake in tests.
    """

    def __init__(self, ttl_seconds, clock=None):
        self.ttl_seconds = float(ttl_seconds)
        self.clock = clock or time.time
        self._entries = {}

    def get(self, key):
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, value = entry
        if self.ttl_seconds > 0 and (self.clock() - stored_at) >= self.ttl_seconds:
            self._entries.pop(key, None)
            return None
        return value

    def set(self, key, value):
        self._entries[key] = (self.clock(), value)

    def clear(self):
        self._entries.clear()

    def __len__(self):
        return len(self._entries)

    def __contains__(self, key):
        return self.get(key) is not None
