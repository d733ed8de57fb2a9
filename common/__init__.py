"""Common utilities for QuiziAI: configuration and logging."""
from .config import (
    ConfigError,
    configure_logger,
    load_config,
    setup_logging,
)

__all__ = ['load_config', 'setup_logging', 'configure_logger', 'ConfigError']
