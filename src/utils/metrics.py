from typing import Dict, Any
from collections import defaultdict
from datetime import datetime, timezone
import logging
import threading


class DispatchMetrics:
    # Counters shared by caller threads and dispatcher workers.

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)
        self._lock = threading.Lock()
        self.reset()

    def reset(self) -> None:
        with self._lock:
            self.startTime = datetime.now(timezone.utc)

            self.records_submitted = 0
            self.records_rejected = 0
            self.tasks_completed = 0

            self.deliveries_by_channel = defaultdict(int)
            self.failures_by_channel = defaultdict(int)

            self.host_resolution_failures = 0

            self.task_times = []

    def recordSubmitted(self) -> None:
        with self._lock:
            self.records_submitted += 1

    def recordRejected(self) -> None:
        with self._lock:
            self.records_rejected += 1

    def recordDelivered(self, channel: str) -> None:
        with self._lock:
            self.deliveries_by_channel[channel] += 1

    def recordFailed(self, channel: str) -> None:
        with self._lock:
            self.failures_by_channel[channel] += 1

    def recordTaskCompleted(self, duration_seconds: float) -> None:
        with self._lock:
            self.tasks_completed += 1
            self.task_times.append(duration_seconds)

    def recordHostResolutionFailure(self) -> None:
        with self._lock:
            self.host_resolution_failures += 1

    def getMetrics(self) -> Dict[str, Any]:
        with self._lock:
            runtimeSeconds = (datetime.now(timezone.utc) - self.startTime).total_seconds()
            times = list(self.task_times)

            return {
                'runtimeSeconds': runtimeSeconds,
                'records': {
                    'submitted': self.records_submitted,
                    'rejected': self.records_rejected,
                    'completed': self.tasks_completed,
                    'pending': self.records_submitted - self.records_rejected - self.tasks_completed
                },
                'deliveries': {
                    'by_channel': dict(self.deliveries_by_channel),
                    'total': sum(self.deliveries_by_channel.values())
                },
                'failures': {
                    'by_channel': dict(self.failures_by_channel),
                    'total': sum(self.failures_by_channel.values())
                },
                'host_resolution_failures': self.host_resolution_failures,
                'performance': {
                    'avg_task_time_ms': sum(times) / len(times) * 1000 if times else 0,
                    'max_task_time_ms': max(times) * 1000 if times else 0
                }
            }

    def logMetrics(self) -> None:
        metrics = self.getMetrics()

        self.logger.info("=== Alarm Dispatch Metrics ===")
        self.logger.info(f"Runtime: {metrics['runtimeSeconds']:.2f} seconds")
        self.logger.info(f"Records submitted: {metrics['records']['submitted']}")
        self.logger.info(f"Records completed: {metrics['records']['completed']}")
        self.logger.info(f"Deliveries: {metrics['deliveries']['total']}")
        self.logger.info(f"Average task time: {metrics['performance']['avg_task_time_ms']:.2f} ms")

        if metrics['failures']['total']:
            self.logger.warning(f"Delivery failures: {metrics['failures']['by_channel']}")
        if metrics['records']['rejected']:
            self.logger.warning(f"Records rejected after shutdown: {metrics['records']['rejected']}")
        if metrics['host_resolution_failures']:
            self.logger.warning(f"Host resolution failures: {metrics['host_resolution_failures']}")
