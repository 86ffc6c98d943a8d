import logging
import sys
from pathlib import Path
from typing import Dict, Any
import json
from datetime import datetime, timezone

# Logger used by LogChannel for delivered alarms
RECORDS_LOGGER = 'alarm.records'


class JSONFormatter(logging.Formatter):
    """
    One JSON object per line.

    Log records emitted by the log channel carry the delivered alarm as an
    'alarm' extra; it is written out as a nested object so log shippers can
    index alarm fields directly.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'thread': record.threadName,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        alarm = getattr(record, 'alarm', None)
        if isinstance(alarm, dict):
            log_data['alarm'] = alarm

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):

    def __init__(self):
        fmt = '%(asctime)s - %(threadName)s - %(name)s - %(levelname)s - %(message)s'
        datefmt = '%Y-%m-%d %H:%M:%S'
        super().__init__(fmt=fmt, datefmt=datefmt)


def _parseLevel(name: Any) -> int:
    level = logging.getLevelName(str(name).upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {name}")
    return level


def _fileHandler(path: str, formatter: logging.Formatter) -> logging.FileHandler:
    log_path = Path(path)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(log_path)
    handler.setFormatter(formatter)
    return handler


def setupLogging(config: Dict[str, Any]) -> None:
    """
    Configure logging from the 'logging' section of the configuration.

    Keys:
        level: root level (default INFO)
        format: text or json
        output: stdout, file or both
        file_path: log file for 'file'/'both' output
        records_file: optional file that receives only delivered alarms
            from the log channel, always as JSON lines
        records_level: minimum level for delivered alarms (default: inherit)

    Raises:
        ValueError: If a configured level is unknown
    """
    logging_config = config.get('logging') or {}

    level = _parseLevel(logging_config.get('level', 'INFO'))
    log_format = logging_config.get('format', 'text')  # json or text
    log_output = logging_config.get('output', 'stdout')  # file, stdout, or both
    log_file_path = logging_config.get('file_path', 'logs/alarm.log')
    records_file = logging_config.get('records_file')
    records_level = logging_config.get('records_level')

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = []

    if log_format == 'json':
        formatter = JSONFormatter()
    else:
        formatter = TextFormatter()

    if log_output in ['file', 'both']:
        root_logger.addHandler(_fileHandler(log_file_path, formatter))

    if log_output in ['stdout', 'both']:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    records_logger = logging.getLogger(RECORDS_LOGGER)
    for handler in records_logger.handlers:
        handler.close()
    records_logger.handlers = []
    records_logger.setLevel(_parseLevel(records_level) if records_level else logging.NOTSET)
    if records_file:
        records_logger.addHandler(_fileHandler(records_file, JSONFormatter()))

    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('requests').setLevel(logging.WARNING)

    root_logger.debug("Logging configured successfully")
