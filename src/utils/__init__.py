"""
Utilities Module

Configuration loading and logging shared by the preprocessing pipeline.
"""

from .config_loader import ConfigLoader, load_config
from .logger import Logger, get_logger, setup_logging

__all__ = [
    'ConfigLoader',
    'load_config',
    'Logger',
    'get_logger',
    'setup_logging',
]
