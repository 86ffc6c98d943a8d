import dataclasses
import inspect
import json
import unittest
from datetime import datetime, timezone

from alarm.errors import InvalidAlarmError
from alarm.record import (
    AlarmLevel,
    ErrorCause,
    NotificationRecord,
    StackFrame,
    captureCallerFrame,
    firstFrame,
)


def raiseBoom():
    raise ValueError("boom")


class TestAlarmLevel(unittest.TestCase):

    def testLevelsAreOrderedBySeverity(self):
        self.assertLess(AlarmLevel.DEBUG, AlarmLevel.INFO)
        self.assertLess(AlarmLevel.INFO, AlarmLevel.WARN)
        self.assertLess(AlarmLevel.WARN, AlarmLevel.ERROR)
        self.assertGreaterEqual(AlarmLevel.ERROR, AlarmLevel.ERROR)
        self.assertEqual(sorted([AlarmLevel.ERROR, AlarmLevel.DEBUG, AlarmLevel.WARN]),
                         [AlarmLevel.DEBUG, AlarmLevel.WARN, AlarmLevel.ERROR])

    def testParse(self):
        self.assertEqual(AlarmLevel.parse('ERROR'), AlarmLevel.ERROR)
        self.assertEqual(AlarmLevel.parse(' info '), AlarmLevel.INFO)
        self.assertEqual(AlarmLevel.parse('warning'), AlarmLevel.WARN)
        self.assertIs(AlarmLevel.parse(AlarmLevel.DEBUG), AlarmLevel.DEBUG)

        with self.assertRaises(ValueError):
            AlarmLevel.parse('critical')

    def testLoggingLevel(self):
        self.assertEqual(AlarmLevel.WARN.loggingLevel, 30)
        self.assertEqual(AlarmLevel.ERROR.loggingLevel, 40)


class TestErrorCause(unittest.TestCase):

    def testFramesStartAtRaiseSite(self):
        try:
            raiseBoom()
        except ValueError as e:
            cause = ErrorCause.fromException(e)

        self.assertEqual(cause.typeName, 'ValueError')
        self.assertEqual(cause.message, 'boom')
        self.assertEqual(cause.frames[0].function, 'raiseBoom')
        self.assertEqual(cause.frames[-1].function, 'testFramesStartAtRaiseSite')
        self.assertIn('ValueError: boom', cause.formatted)
        self.assertEqual(str(cause), 'ValueError: boom')

    def testUnraisedExceptionHasNoFrames(self):
        cause = ErrorCause.fromException(RuntimeError())

        self.assertEqual(cause.frames, ())
        self.assertEqual(str(cause), 'RuntimeError')

    def testFirstFrame(self):
        frames = (StackFrame('a.py', 1, 'a'), StackFrame('b.py', 2, 'b'))

        self.assertEqual(firstFrame(frames), frames[0])
        self.assertIsNone(firstFrame(()))


class TestStackFrame(unittest.TestCase):

    def testRendersLikeTraceback(self):
        frame = StackFrame('service.py', 42, 'charge')

        self.assertEqual(str(frame), 'File "service.py", line 42, in charge')

    def testCaptureCallerFrame(self):
        expectedLine = inspect.currentframe().f_lineno + 1
        frame = captureCallerFrame(0)

        self.assertEqual(frame.function, 'testCaptureCallerFrame')
        self.assertEqual(frame.lineno, expectedLine)
        self.assertIn('captureCallerFrame(0)', frame.line)

    def testCaptureBeyondStackReturnsNone(self):
        self.assertIsNone(captureCallerFrame(10000))


class TestNotificationRecord(unittest.TestCase):

    def makeRecord(self, **overrides):
        values = dict(
            alarmName='disk-full',
            level=AlarmLevel.WARN,
            content='disk at 95%',
            appName='billing',
            timestamp=datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
            host='10.0.0.5',
            traceStack='File "app.py", line 7, in main'
        )
        values.update(overrides)
        return NotificationRecord(**values)

    def testRecordIsImmutable(self):
        record = self.makeRecord()

        with self.assertRaises(dataclasses.FrozenInstanceError):
            record.content = 'changed'

    def testAlarmNameRequired(self):
        with self.assertRaises(InvalidAlarmError):
            self.makeRecord(alarmName='')
        with self.assertRaises(ValueError):
            self.makeRecord(alarmName='   ')

    def testContentMayBeEmptyButNotNone(self):
        self.assertEqual(self.makeRecord(content='').content, '')

        with self.assertRaises(ValueError):
            self.makeRecord(content=None)

    def testLevelMustBeAlarmLevel(self):
        with self.assertRaises(ValueError):
            self.makeRecord(level='warn')

    def testTimestampCapturedAtConstruction(self):
        before = datetime.now(timezone.utc)
        record = NotificationRecord(alarmName='x', level=AlarmLevel.INFO)

        self.assertGreaterEqual(record.timestamp, before)
        self.assertIsNone(record.host)
        self.assertIsNone(record.cause)

    def testToDictIsJsonSafe(self):
        data = self.makeRecord().to_dict()

        self.assertEqual(data['alarmName'], 'disk-full')
        self.assertEqual(data['level'], 'warn')
        self.assertEqual(data['timestamp'], '2026-01-02T03:04:05+00:00')
        self.assertIsNone(data['cause'])
        json.dumps(data)

    def testToText(self):
        text = self.makeRecord().to_text()

        self.assertTrue(text.startswith('[WARN] disk-full'))
        self.assertIn('Host: 10.0.0.5', text)
        self.assertIn('disk at 95%', text)

    def testToMarkdownIncludesCause(self):
        try:
            raiseBoom()
        except ValueError as e:
            cause = ErrorCause.fromException(e)

        markdown = self.makeRecord(cause=cause, host=None).to_markdown()

        self.assertIn('## disk-full', markdown)
        self.assertIn('**Level:** WARN', markdown)
        self.assertIn('`-`', markdown)
        self.assertIn('**Cause:** ValueError: boom', markdown)
        self.assertIn('raiseBoom', markdown)


if __name__ == '__main__':
    unittest.main()
