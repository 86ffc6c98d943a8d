"""
Utilities Module

Common utilities for logging, configuration, and dispatch metrics.
"""

from .config_loader import ConfigLoader
from .logger import setupLogging
from .metrics import DispatchMetrics

__all__ = [
    'ConfigLoader',
    'setupLogging',
    'DispatchMetrics',
]
