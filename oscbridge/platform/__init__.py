"""
Platform-layer utilities shared across oscbridge.
"""

from .logging import create_logger, ColorFormatter
from .config import (
    OSCConfig,
    get_config_path,
    read_config_file,
)

__all__ = [
    "create_logger",
    "ColorFormatter",
    "OSCConfig",
    "get_config_path",
    "read_config_file",
]
