"""Channel registry: resolves configured channel identifiers to live channels."""

from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union
import logging

from .channels import Channel, EmailChannel, LogChannel, SlackChannel, WebhookChannel
from .errors import ConfigurationError

ChannelFactory = Callable[[Dict[str, Any]], Channel]


def parseIdentifiers(value: Union[str, Iterable[str], None]) -> List[str]:
    """
    Split a sender list into identifiers.

    Accepts "mail, webhook" or ["mail", "webhook"]. Order and duplicates
    are kept, blank entries are dropped.

    Raises:
        ConfigurationError: If the value is neither a string nor a list
    """
    if value is None:
        return []
    if isinstance(value, str):
        parts = value.split(',')
    else:
        try:
            parts = [str(item) for item in value]
        except TypeError:
            raise ConfigurationError(
                f"sender_list must be a string or a list, got {type(value).__name__}"
            ) from None
    return [part.strip() for part in parts if part and part.strip()]


class ChannelRegistry:

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)
        self._factories: Dict[str, ChannelFactory] = {}

    def register(self, identifier: str, factory: ChannelFactory) -> None:
        identifier = identifier.strip()
        if not identifier:
            raise ValueError("Channel identifier must not be empty")
        self._factories[identifier] = factory

    def identifiers(self) -> List[str]:
        return sorted(self._factories)

    def __contains__(self, identifier: str) -> bool:
        return identifier in self._factories

    def resolve(
        self,
        identifiers: Iterable[str],
        channelSettings: Optional[Mapping[str, Any]] = None
    ) -> Tuple[Channel, ...]:
        """
        Build one channel per identifier, in order.

        Args:
            identifiers: Configured channel identifiers
            channelSettings: Per-identifier settings passed to each factory

        Returns:
            Immutable sequence of channels

        Raises:
            ConfigurationError: On an unknown identifier or a factory failure
        """
        channelSettings = channelSettings or {}
        channels: List[Channel] = []
        seen = set()

        for identifier in identifiers:
            factory = self._factories.get(identifier)
            if factory is None:
                raise ConfigurationError(
                    f"Unknown channel '{identifier}' (known: {', '.join(self.identifiers()) or 'none'})"
                )

            if identifier in seen:
                self.logger.warning(f"Channel '{identifier}' configured more than once")
            seen.add(identifier)

            settings = channelSettings.get(identifier) or {}
            try:
                channel = factory(dict(settings))
            except ConfigurationError:
                self.logger.error(f"Failed to initialize channel '{identifier}'")
                raise
            except Exception as e:
                self.logger.error(f"Failed to initialize channel '{identifier}': {e}")
                raise ConfigurationError(f"Failed to initialize channel '{identifier}': {e}") from e

            channel.identifier = identifier
            channels.append(channel)
            self.logger.info(f"Channel '{identifier}' initialized")

        return tuple(channels)


def defaultRegistry() -> ChannelRegistry:
    registry = ChannelRegistry()
    registry.register(LogChannel.identifier, LogChannel)
    registry.register(WebhookChannel.identifier, WebhookChannel)
    registry.register(SlackChannel.identifier, SlackChannel)
    registry.register(EmailChannel.identifier, EmailChannel)
    return registry
