
# Alarm Module
# Fire-and-forget alarm dispatch to multiple notification channels.


from .record import AlarmLevel, ErrorCause, NotificationRecord, StackFrame
from .errors import AlarmError, ConfigurationError, DeliveryError, InvalidAlarmError
from .channels import Channel, LogChannel, WebhookChannel, SlackChannel, EmailChannel
from .registry import ChannelRegistry, defaultRegistry
from .dispatcher import Dispatcher, DispatcherConfig
from .facade import Alarm, createAlarm

__all__ = [
    'Alarm',
    'AlarmError',
    'AlarmLevel',
    'Channel',
    'ChannelRegistry',
    'ConfigurationError',
    'DeliveryError',
    'Dispatcher',
    'DispatcherConfig',
    'EmailChannel',
    'ErrorCause',
    'InvalidAlarmError',
    'LogChannel',
    'NotificationRecord',
    'SlackChannel',
    'StackFrame',
    'WebhookChannel',
    'createAlarm',
    'defaultRegistry',
]
