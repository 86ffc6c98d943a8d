# Defines the immutable notification record built for every alarm.
from dataclasses import dataclass, field
from typing import Dict, Any, Optional, Sequence, Tuple
from datetime import datetime, timezone
from enum import Enum
from types import FrameType
import inspect
import linecache
import logging
import traceback

from .errors import InvalidAlarmError


class AlarmLevel(Enum):
    """Alarm severity levels, ordered from least to most severe."""
    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"

    @property
    def rank(self) -> int:
        return list(AlarmLevel).index(self)

    @property
    def loggingLevel(self) -> int:
        return _LOGGING_LEVELS[self]

    @classmethod
    def parse(cls, value: Any) -> 'AlarmLevel':
        # Accepts a member or a case-insensitive level name.
        if isinstance(value, cls):
            return value
        name = str(value).strip().lower()
        if name == 'warning':
            name = 'warn'
        try:
            return cls(name)
        except ValueError:
            raise ValueError(f"Unknown alarm level: {value!r}") from None

    def __lt__(self, other):
        if not isinstance(other, AlarmLevel):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, AlarmLevel):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, AlarmLevel):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, AlarmLevel):
            return NotImplemented
        return self.rank >= other.rank


_LOGGING_LEVELS = {
    AlarmLevel.DEBUG: logging.DEBUG,
    AlarmLevel.INFO: logging.INFO,
    AlarmLevel.WARN: logging.WARNING,
    AlarmLevel.ERROR: logging.ERROR,
}


@dataclass(frozen=True)
class StackFrame:
    # One call-site frame, rendered like a traceback line.
    filename: str
    lineno: int
    function: str
    line: Optional[str] = None

    @classmethod
    def fromSummary(cls, summary: traceback.FrameSummary) -> 'StackFrame':
        return cls(
            filename=summary.filename,
            lineno=summary.lineno,
            function=summary.name,
            line=summary.line or None
        )

    @classmethod
    def fromFrame(cls, frame: FrameType) -> 'StackFrame':
        code = frame.f_code
        line = linecache.getline(code.co_filename, frame.f_lineno).strip()
        return cls(
            filename=code.co_filename,
            lineno=frame.f_lineno,
            function=code.co_name,
            line=line or None
        )

    def __str__(self) -> str:
        return f'File "{self.filename}", line {self.lineno}, in {self.function}'


@dataclass(frozen=True)
class ErrorCause:
    """
    Structured copy of an exception attached to an alarm.

    frames are ordered innermost first, so frames[0] is where the
    exception was raised.
    """
    typeName: str
    message: str
    frames: Tuple[StackFrame, ...] = ()
    formatted: str = ""

    @classmethod
    def fromException(cls, error: BaseException) -> 'ErrorCause':
        summaries = traceback.extract_tb(error.__traceback__)
        frames = tuple(StackFrame.fromSummary(s) for s in reversed(summaries))
        formatted = ''.join(
            traceback.format_exception(type(error), error, error.__traceback__)
        )
        return cls(
            typeName=type(error).__name__,
            message=str(error),
            frames=frames,
            formatted=formatted
        )

    def __str__(self) -> str:
        if self.message:
            return f"{self.typeName}: {self.message}"
        return self.typeName


def firstFrame(frames: Sequence[StackFrame]) -> Optional[StackFrame]:
    return frames[0] if frames else None


def captureCallerFrame(skip: int = 0) -> Optional[StackFrame]:
    """
    Capture a frame above the function calling this one.

    Args:
        skip: 0 returns the direct caller of captureCallerFrame, 1 its
            caller, and so on.

    Returns:
        The frame, or None if the stack is not that deep or frame
        introspection is unavailable.
    """
    frame = inspect.currentframe()
    try:
        target = frame.f_back if frame is not None else None
        for _ in range(skip):
            if target is None:
                break
            target = target.f_back
        return StackFrame.fromFrame(target) if target is not None else None
    finally:
        del frame


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class NotificationRecord:
    # Payload delivered to every channel for one alarm occurrence
    alarmName: str
    level: AlarmLevel
    content: str = ""
    appName: str = ""
    timestamp: datetime = field(default_factory=_now)
    host: Optional[str] = None
    cause: Optional[ErrorCause] = None
    traceStack: str = ""

    def __post_init__(self):
        if not isinstance(self.alarmName, str) or not self.alarmName.strip():
            raise InvalidAlarmError("alarmName must be a non-empty string")
        if not isinstance(self.level, AlarmLevel):
            raise InvalidAlarmError(f"level must be an AlarmLevel, got {self.level!r}")
        if self.content is None:
            raise InvalidAlarmError("content must not be None")

    def formattedTime(self) -> str:
        return self.timestamp.strftime('%Y-%m-%d %H:%M:%S %Z').strip()

    def to_dict(self) -> Dict[str, Any]:
        # JSON-safe representation for webhook payloads.
        return {
            'alarmName': self.alarmName,
            'appName': self.appName,
            'level': self.level.value,
            'content': self.content,
            'timestamp': self.timestamp.isoformat(),
            'host': self.host,
            'cause': str(self.cause) if self.cause else None,
            'traceStack': self.traceStack,
        }

    def to_text(self) -> str:
        lines = [
            f"[{self.level.value.upper()}] {self.alarmName}",
            f"App: {self.appName or '-'}",
            f"Host: {self.host or '-'}",
            f"Time: {self.formattedTime()}",
            f"Trace: {self.traceStack or '-'}",
        ]
        if self.content:
            lines.append("")
            lines.append(self.content)
        if self.cause:
            lines.append("")
            lines.append(f"Cause: {self.cause}")
        return "\n".join(lines)

    def to_markdown(self) -> str:
        #format record as markdown for IM notifications.
        md = f"## {self.alarmName}\n\n"
        md += f"**Level:** {self.level.value.upper()}\n"
        md += f"**App:** {self.appName or '-'}\n"
        md += f"**Host:** `{self.host or '-'}`\n"
        md += f"**Time:** {self.formattedTime()}\n\n"

        if self.content:
            md += f"**Content:**\n{self.content}\n\n"

        md += f"**Trace:** `{self.traceStack or '-'}`\n"

        if self.cause:
            md += f"\n**Cause:** {self.cause}\n"
            if self.cause.formatted:
                md += f"```\n{self.cause.formatted.rstrip()}\n```\n"

        return md
