"""
Alarm Sender

Command line entry point: loads the YAML configuration, wires the alarm
dispatcher and sends a single alarm through every configured channel.
"""

import sys
import logging
import click

from utils.config_loader import ConfigLoader
from utils.logger import setupLogging
from alarm.errors import ConfigurationError
from alarm.facade import Alarm, createAlarm


def buildAlarm(config_path: str) -> Alarm:
    """
    Load configuration, set up logging and build the alarm facade.

    Raises:
        FileNotFoundError: If config file not found
        ValueError: If the configuration cannot be parsed
        ConfigurationError: If the alarm section is invalid
    """
    loader = ConfigLoader(config_path)
    config = loader.load()

    setupLogging(config)
    logger = logging.getLogger('alarm-send')

    try:
        alarm = createAlarm(config)
    except ConfigurationError as e:
        logger.error(f"Failed to initialize alarm dispatcher: {e}")
        raise

    logger.info("Alarm dispatcher initialized successfully")
    return alarm


@click.command()
@click.option(
    '--config',
    default='config/alarm.yaml',
    help='Path to configuration file'
)
@click.option(
    '--level',
    default='info',
    type=click.Choice(['debug', 'info', 'warn', 'error'], case_sensitive=False),
    help='Alarm level (default: info)'
)
@click.option(
    '--list-channels',
    is_flag=True,
    help='Print the configured channels and exit'
)
@click.argument('name', required=False)
@click.argument('content', required=False, default='')
def cli(config, level, list_channels, name, content):
    """Send an alarm NAME with optional CONTENT to all configured channels."""

    if not list_channels and not name:
        raise click.UsageError("NAME is required unless --list-channels is given")

    try:
        alarm = buildAlarm(config)
    except (FileNotFoundError, ValueError, ConfigurationError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    try:
        if list_channels:
            for channel in alarm.dispatcher.channels:
                click.echo(f"{channel.identifier}\t{channel.__class__.__name__}")
            return

        getattr(alarm, level.lower())(name, content)
    finally:
        # Wait so the process does not exit before delivery
        alarm.shutdown(wait=True)


if __name__ == '__main__':
    cli()
