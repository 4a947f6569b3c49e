"""
Volume List Cache

Snapshot of the last full volume enumeration, kept so that the pages of a
bounded ListVolumes walk all come from the same enumeration.

Rules:
- Filled only by ListVolumes when a page is smaller than the full listing
- Cleared by every successful CreateVolume / DeleteVolume
- The lock is never held while talking to the gateway
"""

import threading
from contextlib import contextmanager
from typing import Iterator, Sequence, Tuple

from gateway.models import Volume


class ReadWriteLock:
    """Many readers or one writer. Waiting writers block new readers."""

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    def acquire_read(self):
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1

    def release_read(self):
        with self._cond:
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self):
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True

    def release_write(self):
        with self._cond:
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()


class VolumeListCache:
    """Process-wide snapshot of the last full volume listing"""

    def __init__(self):
        self._lock = ReadWriteLock()
        self._volumes: Tuple[Volume, ...] = ()

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._volumes)

    def snapshot(self) -> Tuple[Volume, ...]:
        """Return the cached listing. The tuple is never mutated after it is stored."""
        with self._lock.read_locked():
            return self._volumes

    def store(self, volumes: Sequence[Volume]) -> None:
        frozen = tuple(volumes)
        with self._lock.write_locked():
            self._volumes = frozen

    def clear(self) -> None:
        with self._lock.write_locked():
            self._volumes = ()
