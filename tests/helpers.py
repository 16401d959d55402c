from __future__ import annotations

import threading
from typing import Callable, List, Tuple

from ploegwissel.core.store import MemoryKeyValueStore


class _ScheduledCall:
    def __init__(self, when: float, fn: Callable[[], None]) -> None:
        self.when = when
        self.fn = fn
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Scheduler driven by an explicit clock; nothing runs until advance()."""

    def __init__(self) -> None:
        self.now = 0.0
        self.calls: List[_ScheduledCall] = []

    def call_later(self, delay: float, fn: Callable[[], None]) -> _ScheduledCall:
        call = _ScheduledCall(self.now + delay, fn)
        self.calls.append(call)
        return call

    @property
    def pending(self) -> List[_ScheduledCall]:
        return [c for c in self.calls if not c.cancelled]

    def advance(self, seconds: float) -> None:
        self.now += seconds
        due = [c for c in self.pending if c.when <= self.now + 1e-9]
        self.calls = [c for c in self.pending if c not in due]
        for call in sorted(due, key=lambda c: c.when):
            call.fn()


class RecordingStore(MemoryKeyValueStore):
    def __init__(self) -> None:
        super().__init__()
        self.writes: List[Tuple[str, str]] = []

    def set(self, key: str, value: str) -> None:
        self.writes.append((key, value))
        super().set(key, value)


class BrokenStore:
    def get(self, key: str):
        raise OSError("disk unavailable")

    def set(self, key: str, value: str) -> None:
        raise OSError("quota exceeded")

    def delete(self, key: str) -> None:
        raise OSError("disk unavailable")


class BlockingStore(MemoryKeyValueStore):
    """Holds the first ``set`` until ``release`` is signaled."""

    def __init__(self) -> None:
        super().__init__()
        self.entered = threading.Event()
        self.release = threading.Event()
        self._held = False

    def set(self, key: str, value: str) -> None:
        if not self._held:
            self._held = True
            self.entered.set()
            self.release.wait(timeout=5)
        super().set(key, value)
