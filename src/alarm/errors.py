# Exception hierarchy for the alarm dispatcher.

from typing import Optional


class AlarmError(Exception):
    """Base exception for all alarm errors."""


class ConfigurationError(AlarmError):
    """Invalid startup configuration. The dispatcher must not be built."""


class DeliveryError(AlarmError):
    # Raised by Channel.send when a transport fails for one record.

    def __init__(self, channel: str, alarmName: str, cause: Optional[BaseException] = None):
        message = f"Channel '{channel}' failed to deliver alarm '{alarmName}'"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)
        self.channel = channel
        self.alarmName = alarmName
        self.__cause__ = cause


class InvalidAlarmError(AlarmError, ValueError):
    """A NotificationRecord was built with an invalid field."""
