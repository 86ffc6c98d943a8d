import unittest

from alarm.channels import LogChannel, WebhookChannel
from alarm.errors import ConfigurationError
from alarm.registry import ChannelRegistry, defaultRegistry, parseIdentifiers

from channel_fakes import RecordingChannel


class TestParseIdentifiers(unittest.TestCase):

    def testCommaSeparatedString(self):
        self.assertEqual(parseIdentifiers('log, webhook,,log '), ['log', 'webhook', 'log'])

    def testList(self):
        self.assertEqual(parseIdentifiers(['email', ' slack', '']), ['email', 'slack'])

    def testNone(self):
        self.assertEqual(parseIdentifiers(None), [])

    def testScalarIsConfigurationError(self):
        with self.assertRaises(ConfigurationError):
            parseIdentifiers(5)


class TestChannelRegistry(unittest.TestCase):

    def setUp(self):
        self.registry = ChannelRegistry()
        self.registry.register('a', lambda settings: RecordingChannel(config=settings))
        self.registry.register('b', lambda settings: RecordingChannel(config=settings))

    def testResolvePreservesOrderAndDuplicates(self):
        channels = self.registry.resolve(['b', 'a', 'b'])

        self.assertIsInstance(channels, tuple)
        self.assertEqual([c.identifier for c in channels], ['b', 'a', 'b'])
        self.assertIsNot(channels[0], channels[2])

    def testResolvePassesSettings(self):
        channels = self.registry.resolve(['a'], {'a': {'min_level': 'error'}})

        self.assertEqual(channels[0].minLevel.value, 'error')

    def testUnknownIdentifierFailsFast(self):
        with self.assertRaises(ConfigurationError) as ctx:
            self.registry.resolve(['a', 'sms'])

        self.assertIn('sms', str(ctx.exception))

    def testFactoryFailureIsConfigurationError(self):
        def broken(settings):
            raise KeyError('token')

        self.registry.register('broken', broken)

        with self.assertRaises(ConfigurationError):
            self.registry.resolve(['a', 'broken'])

    def testRegisterRejectsEmptyIdentifier(self):
        with self.assertRaises(ValueError):
            self.registry.register(' ', LogChannel)

    def testContains(self):
        self.assertIn('a', self.registry)
        self.assertNotIn('c', self.registry)


class TestDefaultRegistry(unittest.TestCase):

    def testBuiltInTransports(self):
        self.assertEqual(defaultRegistry().identifiers(), ['email', 'log', 'slack', 'webhook'])

    def testResolveBuiltIns(self):
        channels = defaultRegistry().resolve(
            parseIdentifiers('log,webhook'),
            {'webhook': {'url': 'https://hooks.example.com/alarm'}}
        )

        self.assertIsInstance(channels[0], LogChannel)
        self.assertIsInstance(channels[1], WebhookChannel)

    def testMissingTransportSettings(self):
        with self.assertRaises(ConfigurationError):
            defaultRegistry().resolve(['webhook'])


if __name__ == '__main__':
    unittest.main()
