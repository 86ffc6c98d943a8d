"""
Alarm Facade

Severity-leveled entry points used by application code. Each call builds a
NotificationRecord and hands it to the dispatcher without waiting for
delivery.
"""

from typing import Any, Dict, Optional, Union
import logging
import socket

from utils.metrics import DispatchMetrics

from .dispatcher import Dispatcher, DispatcherConfig
from .errors import InvalidAlarmError
from .record import (
    AlarmLevel,
    ErrorCause,
    NotificationRecord,
    captureCallerFrame,
    firstFrame,
)
from .registry import ChannelRegistry, defaultRegistry

# Frames between _buildRecord and the code calling a level method:
# _buildRecord -> _emit -> info/debug/warn/error -> caller.
# Must be updated whenever a wrapper is added to that path.
CALLER_SKIP_DEPTH = 3

Cause = Union[BaseException, ErrorCause, None]


class Alarm:
    """
    Entry point for raising alarms.

    Usage:
        alarm = createAlarm(config)
        alarm.error("payment-gateway", "charge request timed out", exc)

    None of the methods raise: invalid alarms and delivery problems are
    logged instead.
    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        appName: str = "",
        metrics: Optional[DispatchMetrics] = None
    ):
        self.dispatcher = dispatcher
        self.appName = appName or ""
        self.metrics = metrics
        self.logger = logging.getLogger(self.__class__.__name__)

    def debug(self, alarmName: str, content: str = "", cause: Cause = None) -> None:
        self._emit(AlarmLevel.DEBUG, alarmName, content, cause)

    def info(self, alarmName: str, content: str = "", cause: Cause = None) -> None:
        self._emit(AlarmLevel.INFO, alarmName, content, cause)

    def warn(self, alarmName: str, content: str = "", cause: Cause = None) -> None:
        self._emit(AlarmLevel.WARN, alarmName, content, cause)

    warning = warn

    def error(self, alarmName: str, content: str = "", cause: Cause = None) -> None:
        self._emit(AlarmLevel.ERROR, alarmName, content, cause)

    def send(self, record: NotificationRecord) -> None:
        # Raw entry point for prebuilt records.
        try:
            self.dispatcher.submit(record)
        except Exception as e:
            self.logger.error(f"Failed to submit alarm {record.alarmName}: {e}", exc_info=True)

    def _emit(self, level: AlarmLevel, alarmName: str, content: str, cause: Cause) -> None:
        try:
            record = self._buildRecord(level, alarmName, content, cause)
        except InvalidAlarmError as e:
            self.logger.error(f"Invalid alarm dropped: {e}")
            return
        except Exception:
            self.logger.error(f"Failed to build alarm {alarmName!r}, dropped", exc_info=True)
            return
        self.send(record)

    def _buildRecord(
        self,
        level: AlarmLevel,
        alarmName: str,
        content: str,
        cause: Cause
    ) -> NotificationRecord:
        if isinstance(cause, BaseException):
            cause = ErrorCause.fromException(cause)
        elif cause is not None and not isinstance(cause, ErrorCause):
            cause = ErrorCause(typeName=type(cause).__name__, message=str(cause))

        frame = firstFrame(cause.frames) if cause is not None else None
        if frame is None:
            frame = captureCallerFrame(CALLER_SKIP_DEPTH)

        return NotificationRecord(
            alarmName=alarmName,
            level=level,
            content="" if content is None else str(content),
            appName=self.appName,
            host=self._resolveHost(),
            cause=cause,
            traceStack=str(frame) if frame is not None else ""
        )

    def _resolveHost(self) -> Optional[str]:
        try:
            return socket.gethostbyname(socket.gethostname())
        except (OSError, UnicodeError) as e:
            self.logger.error(f"Failed to resolve local host address: {e}")
            if self.metrics is not None:
                self.metrics.recordHostResolutionFailure()
            return None

    def shutdown(self, wait: bool = True) -> None:
        self.dispatcher.shutdown(wait=wait)

    def __enter__(self) -> 'Alarm':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown(wait=True)


def createAlarm(config: Dict[str, Any], registry: Optional[ChannelRegistry] = None) -> Alarm:
    """
    Wire an Alarm from a loaded configuration document.

    Args:
        config: Configuration dictionary with an 'alarm' section
        registry: Channel factories; defaults to the built-in transports

    Raises:
        ConfigurationError: If the configuration or any channel is invalid
    """
    dispatcherConfig = DispatcherConfig.fromDict(config)
    registry = registry or defaultRegistry()

    channels = registry.resolve(dispatcherConfig.senderList, dispatcherConfig.channelSettings)
    dispatcher = Dispatcher(dispatcherConfig, channels)

    return Alarm(dispatcher, dispatcherConfig.appName, metrics=dispatcher.metrics)
