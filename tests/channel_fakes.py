"""
In-memory channels and dispatchers shared by the tests.
"""

import threading
from typing import Any, Dict, List, Optional, Tuple

from alarm.channels import Channel
from alarm.record import NotificationRecord


class RecordingChannel(Channel):

    identifier = "recording"

    def __init__(
        self,
        name: str = "recording",
        calls: Optional[List[Tuple[str, str]]] = None,
        fail: bool = False,
        config: Optional[Dict[str, Any]] = None
    ):
        super().__init__(config or {})
        self.identifier = name
        self.calls = calls if calls is not None else []
        self.fail = fail
        self.records: List[NotificationRecord] = []
        self._lock = threading.Lock()

    def deliver(self, record: NotificationRecord) -> None:
        with self._lock:
            self.records.append(record)
            self.calls.append((self.identifier, record.alarmName))
        if self.fail:
            raise RuntimeError(f"{self.identifier} is down")


class BlockingChannel(Channel):
    # Holds every delivery until release is set.

    identifier = "blocking"

    def __init__(self, release: threading.Event):
        super().__init__({})
        self.release = release
        self.started = threading.Semaphore(0)
        self.active = 0
        self.maxActive = 0
        self.records: List[NotificationRecord] = []
        self._lock = threading.Lock()

    def deliver(self, record: NotificationRecord) -> None:
        with self._lock:
            self.active += 1
            self.maxActive = max(self.maxActive, self.active)
        self.started.release()

        self.release.wait(timeout=10)

        with self._lock:
            self.active -= 1
            self.records.append(record)


class RecordingDispatcher:
    # Synchronous stand-in: keeps submitted records.

    def __init__(self):
        self.records: List[NotificationRecord] = []
        self.shutdownCalls = 0

    def submit(self, record: NotificationRecord) -> None:
        self.records.append(record)

    def shutdown(self, wait: bool = True) -> None:
        self.shutdownCalls += 1
