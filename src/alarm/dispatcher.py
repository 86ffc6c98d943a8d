# Alarm Dispatcher
# Fans notification records out to every configured channel on a fixed worker pool.

from typing import Dict, Any, Mapping, Optional, Sequence, Tuple
from dataclasses import dataclass, field
from concurrent.futures import ThreadPoolExecutor
import logging
import time

from utils.metrics import DispatchMetrics

from .channels import Channel
from .errors import ConfigurationError, DeliveryError
from .record import NotificationRecord
from .registry import parseIdentifiers

DEFAULT_THREAD_POOL_SIZE = 10


def _parsePoolSize(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, bool):
        raise ConfigurationError(f"thread_pool_size must be an integer, got {value!r}")
    try:
        size = int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"thread_pool_size must be an integer, got {value!r}") from None
    if isinstance(value, float) and size != value:
        raise ConfigurationError(f"thread_pool_size must be an integer, got {value!r}")
    return size


@dataclass(frozen=True)
class DispatcherConfig:
    """
    Startup configuration of the dispatcher.

    A thread pool size of 0 selects DEFAULT_THREAD_POOL_SIZE.
    """
    senderList: Tuple[str, ...]
    threadPoolSize: int = DEFAULT_THREAD_POOL_SIZE
    appName: str = ""
    channelSettings: Mapping[str, Dict[str, Any]] = field(default_factory=dict)

    def __post_init__(self):
        senders = tuple(parseIdentifiers(self.senderList))
        if not senders:
            raise ConfigurationError("sender_list must name at least one channel")
        object.__setattr__(self, 'senderList', senders)

        size = _parsePoolSize(self.threadPoolSize)
        if size < 0:
            raise ConfigurationError(f"thread_pool_size must be positive, got {size}")
        object.__setattr__(self, 'threadPoolSize', size or DEFAULT_THREAD_POOL_SIZE)

        object.__setattr__(self, 'appName', "" if self.appName is None else str(self.appName))

        if not isinstance(self.channelSettings, Mapping):
            raise ConfigurationError("channels must be a mapping of channel settings")

    @classmethod
    def fromDict(cls, config: Dict[str, Any]) -> 'DispatcherConfig':
        """
        Build from a loaded configuration document.

        Args:
            config: Configuration dictionary with an 'alarm' section

        Raises:
            ConfigurationError: If the section is missing or invalid
        """
        section = (config or {}).get('alarm')
        if not isinstance(section, dict):
            raise ConfigurationError("Missing required configuration section: alarm")

        return cls(
            senderList=section.get('sender_list'),
            threadPoolSize=section.get('thread_pool_size'),
            appName=section.get('app_name', ""),
            channelSettings=section.get('channels') or {}
        )


class Dispatcher:
    """
    Delivers records asynchronously.

    Every submitted record becomes one task on a ThreadPoolExecutor with a
    fixed number of workers. The task calls each channel in configured order
    on a single worker. The executor queue is unbounded: when all workers
    are busy, tasks wait and submit() still returns at once. There is no
    backpressure, rejection or retry.
    """

    def __init__(
        self,
        config: DispatcherConfig,
        channels: Sequence[Channel],
        metrics: Optional[DispatchMetrics] = None
    ):
        self.config = config
        self.logger = logging.getLogger(self.__class__.__name__)
        self._channels: Tuple[Channel, ...] = tuple(channels)
        self.metrics = metrics or DispatchMetrics()
        self.executor = ThreadPoolExecutor(
            max_workers=config.threadPoolSize,
            thread_name_prefix='alarm-sender'
        )
        self.logger.debug(f"threadPoolSize={config.threadPoolSize}")
        self.logger.info(
            f"Dispatcher initialized with {len(self._channels)} channels: "
            f"{', '.join(c.identifier for c in self._channels) or 'none'}"
        )

    @property
    def channels(self) -> Tuple[Channel, ...]:
        return self._channels

    def submit(self, record: NotificationRecord) -> None:
        # Fire and forget; never raises to the caller.
        self.metrics.recordSubmitted()
        try:
            self.executor.submit(self._deliver, record)
        except RuntimeError as e:
            self.metrics.recordRejected()
            self.logger.error(f"Alarm {record.alarmName} dropped: {e}")

    def _deliver(self, record: NotificationRecord) -> None:
        start = time.monotonic()

        for channel in self._channels:
            try:
                channel.send(record)
                self.metrics.recordDelivered(channel.identifier)
            except DeliveryError as e:
                self.metrics.recordFailed(channel.identifier)
                self.logger.error(
                    f"Error sending alarm {record.alarmName} to {channel.identifier}: {e}"
                )
            except Exception as e:
                self.metrics.recordFailed(channel.identifier)
                self.logger.error(
                    f"Unexpected error sending alarm {record.alarmName} to {channel.identifier}: {e}",
                    exc_info=True
                )

        self.metrics.recordTaskCompleted(time.monotonic() - start)

    def shutdown(self, wait: bool = True) -> None:
        """
        Stop accepting records.

        Args:
            wait: Block until queued records have been delivered
        """
        self.logger.info("Shutting down dispatcher...")
        self.executor.shutdown(wait=wait)
        self.metrics.logMetrics()

    def __enter__(self) -> 'Dispatcher':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown(wait=True)
