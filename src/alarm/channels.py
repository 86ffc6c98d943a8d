#Implements notification channels for alarms.

from abc import ABC, abstractmethod
from typing import Dict, Any, List
import logging
import requests
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from html import escape

from utils.logger import RECORDS_LOGGER

from .errors import ConfigurationError, DeliveryError
from .record import AlarmLevel, NotificationRecord


class Channel(ABC): #Base class for notification channels.

    identifier = "channel"

    def __init__(self, config: Dict[str, Any]):
        self.config = config or {}
        self.logger = logging.getLogger(self.__class__.__name__)
        try:
            self.minLevel = AlarmLevel.parse(self.config.get('min_level', 'debug'))
        except ValueError as e:
            raise ConfigurationError(f"{self.identifier}: {e}") from e

    @abstractmethod
    def deliver(self, record: NotificationRecord) -> None:
        # Transport-specific send. May raise anything.
        pass

    def shouldNotify(self, record: NotificationRecord) -> bool:
        return record.level >= self.minLevel

    def send(self, record: NotificationRecord) -> None:
        """
        Deliver a record through this channel.

        Records below min_level are skipped.

        Raises:
            DeliveryError: If the transport failed for any reason
        """
        if not self.shouldNotify(record):
            self.logger.debug(f"Skipping {record.alarmName}: below {self.minLevel.value}")
            return

        try:
            self.deliver(record)
        except DeliveryError:
            raise
        except Exception as e:
            raise DeliveryError(self.identifier, record.alarmName, e) from e

    def _require(self, key: str) -> Any:
        value = self.config.get(key)
        if not value:
            raise ConfigurationError(f"{self.identifier} channel requires '{key}'")
        return value

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.identifier})"


class LogChannel(Channel):

    identifier = "log"

    def __init__(self, config: Dict[str, Any]):
        super().__init__(config)
        self.recordLogger = logging.getLogger(self.config.get('logger', RECORDS_LOGGER))

    def deliver(self, record: NotificationRecord) -> None:
        self.recordLogger.log(record.level.loggingLevel, record.to_text(), extra={'alarm': record.to_dict()})


class WebhookChannel(Channel):

    identifier = "webhook"

    def __init__(self, config: Dict[str, Any]):
        super().__init__(config)
        self.url = self._require('url')
        self.method = self.config.get('method', 'POST')
        self.headers = self.config.get('headers', {})
        self.timeout = self.config.get('timeout', 10)

    def deliver(self, record: NotificationRecord) -> None:
        response = requests.request(
            method=self.method,
            url=self.url,
            json=record.to_dict(),
            headers=self.headers,
            timeout=self.timeout
        )
        response.raise_for_status()

        self.logger.info(f"Alarm sent to webhook: {record.alarmName}")


class SlackChannel(Channel):

    identifier = "slack"

    def __init__(self, config: Dict[str, Any]):
        super().__init__(config)
        self.webhook_url = self._require('webhook_url')
        self.channel = self.config.get('channel')
        self.username = self.config.get('username', 'Alarm')
        self.mention_on_error = self.config.get('mention_on_error', True)
        self.timeout = self.config.get('timeout', 10)

    def buildPayload(self, record: NotificationRecord) -> Dict[str, Any]:
        text = ""
        if record.level == AlarmLevel.ERROR and self.mention_on_error:
            text = f"<!channel> Error alarm from {record.appName or 'unknown app'}"

        fields: List[Dict[str, Any]] = [
            {
                'title': 'Level',
                'value': record.level.value.upper(),
                'short': True
            },
            {
                'title': 'App',
                'value': record.appName or '-',
                'short': True
            },
            {
                'title': 'Host',
                'value': record.host or '-',
                'short': True
            },
            {
                'title': 'Time',
                'value': record.formattedTime(),
                'short': True
            },
            {
                'title': 'Trace',
                'value': record.traceStack or '-',
                'short': False
            }
        ]
        if record.cause:
            fields.append({
                'title': 'Cause',
                'value': str(record.cause)[:500],
                'short': False
            })

        attachment = {
            'title': record.alarmName,
            'text': record.content[:500],
            'fields': fields,
            'footer': record.appName or 'alarm',
            'ts': int(record.timestamp.timestamp())
        }

        payload: Dict[str, Any] = {
            'username': self.username,
            'text': text,
            'attachments': [attachment]
        }
        if self.channel:
            payload['channel'] = self.channel
        return payload

    def deliver(self, record: NotificationRecord) -> None:
        response = requests.post(self.webhook_url, json=self.buildPayload(record), timeout=self.timeout)
        response.raise_for_status()

        self.logger.info(f"Alarm sent to Slack: {record.alarmName}")


class EmailChannel(Channel):

    identifier = "email"

    def __init__(self, config: Dict[str, Any]):
        super().__init__(config)
        self.smtp_host = self._require('smtp_host')
        self.smtp_port = self.config.get('smtp_port', 587)
        self.smtp_user = self.config.get('smtp_user')
        self.smtp_password = self.config.get('smtp_password')
        self.use_tls = self.config.get('use_tls', True)
        self.from_address = self._require('from_address')
        to_addresses = self._require('to_addresses')
        if isinstance(to_addresses, str):
            to_addresses = [a.strip() for a in to_addresses.split(',') if a.strip()]
        self.to_addresses = list(to_addresses)
        self.subject_prefix = self.config.get('subject_prefix', '[ALARM]')
        self.timeout = self.config.get('timeout', 20)

    def buildMessage(self, record: NotificationRecord) -> MIMEMultipart:
        msg = MIMEMultipart('alternative')
        msg['Subject'] = f"{self.subject_prefix} [{record.level.value.upper()}] {record.alarmName}"
        msg['From'] = self.from_address
        msg['To'] = ', '.join(self.to_addresses)

        text_body = record.to_markdown()

        cause_html = ""
        if record.cause:
            cause_html = f"""
    <h3>Cause</h3>
    <pre>{escape(record.cause.formatted or str(record.cause))}</pre>"""

        html_body = f"""
<html>
<body>
    <h2>{escape(record.alarmName)}</h2>
    <p><strong>Level:</strong> {record.level.value.upper()}</p>
    <p><strong>App:</strong> {escape(record.appName or '-')}</p>
    <p><strong>Host:</strong> {escape(record.host or '-')}</p>
    <p><strong>Time:</strong> {record.formattedTime()}</p>
    <p><strong>Trace:</strong> <code>{escape(record.traceStack or '-')}</code></p>

    <h3>Content</h3>
    <p>{escape(record.content).replace(chr(10), '<br>')}</p>
{cause_html}
</body>
</html>
            """

        msg.attach(MIMEText(text_body, 'plain'))
        msg.attach(MIMEText(html_body, 'html'))
        return msg

    def deliver(self, record: NotificationRecord) -> None:
        msg = self.buildMessage(record)

        with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.timeout) as server:
            if self.use_tls:
                server.starttls()
            if self.smtp_user:
                server.login(self.smtp_user, self.smtp_password)
            server.send_message(msg)

        self.logger.info(f"Alarm sent via email: {record.alarmName}")
