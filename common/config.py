#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import copy
import json
import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Any, Mapping, Optional

import yaml

DEFAULT_LOG_FORMAT = '[%(asctime).19s] [%(name)s] [%(levelname)s] %(message)s'

# Rotate the log file once it reaches 10 MiB
DEFAULT_MAX_BYTES = 10 * 1024 * 1024
DEFAULT_BACKUP_COUNT = 5

DEFAULT_CONFIG: dict[str, Any] = {
    'use_mocks': False,
    'language': 'Spanish',
    'provider_order': ['gemini', 'groq', 'huggingface'],
    'providers': {
        'gemini': {},
        'groq': {},
        'huggingface': {},
    },
    'queue': {
        'low_watermark': 2,
        'target_size': 10,
    },
    'batch': {
        'pacing_delay': 0.5,
    },
    'content': {
        'primary_language': 'es',
        'fallback_language': 'en',
        'timeout': 10.0,
    },
    'logging': {
        'level': 'info',
        'file': None,
        'format': DEFAULT_LOG_FORMAT,
    },
}

# Environment variable -> (section, key) for provider credentials
ENV_CREDENTIALS = {
    'GEMINI_API_KEY': ('gemini', 'api_key'),
    'GROQ_API_KEY': ('groq', 'api_key'),
    'HUGGINGFACE_API_KEY': ('huggingface', 'api_key'),
    'HUGGINGFACE_MODEL': ('huggingface', 'default_model'),
}

TRUTHY = ('1', 'true', 'yes', 'on')


class ConfigError(Exception):
    """Raised when a configuration file cannot be loaded."""


class RobustRotatingFileHandler(RotatingFileHandler):
    """RotatingFileHandler that gracefully handles flush errors on Windows"""

    def flush(self):
        """Flush the stream, catching OSError on Windows file handles"""
        try:
            super().flush()
        except OSError as e:
            # Windows can fail to flush with "Invalid argument" when the
            # handle is in an inconsistent state
            if e.errno != 22:  # EINVAL
                raise


def configure_logger(logger,
                     log_file=None,
                     log_format=None,
                     log_level=logging.INFO,
                     max_bytes=DEFAULT_MAX_BYTES,
                     backup_count=DEFAULT_BACKUP_COUNT):
    """Configure a logger with a rotating file or stream handler

    Args:
        logger: Logger instance or logger name string
        log_file: File path string or file-like object (None for stderr)
        log_format: Format string for log messages
        log_level: Logging level (e.g., logging.INFO, logging.DEBUG)
        max_bytes: Size at which the log file is rotated
        backup_count: Number of rotated files to keep

    Returns:
        Configured logger instance
    """
    if isinstance(log_file, str):
        handler = RobustRotatingFileHandler(
            log_file,
            mode='a',
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding='utf-8',
            errors='replace'  # Replace problematic chars
        )
    else:
        handler = logging.StreamHandler(log_file)  # Default to stderr if None

    formatter = logging.Formatter(log_format)

    # Get logger by name if string provided
    if isinstance(logger, str):
        logger = logging.getLogger(logger)

    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(log_level)

    return logger


def parse_log_level(value, default=logging.INFO):
    """Turn 'debug'/'INFO'/10 into a logging level constant"""
    if isinstance(value, int):
        return value
    if not value:
        return default
    level = getattr(logging, str(value).upper(), None)
    if not isinstance(level, int):
        raise ConfigError(f'Unknown log level: {value!r}')
    return level


def _merge(base, override):
    """Recursively merge override into a copy of base"""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def read_config_file(path):
    """Parse a JSON or YAML configuration file

    Args:
        path: File path; .yaml/.yml is parsed as YAML, anything else as JSON

    Returns:
        Configuration dictionary

    Raises:
        ConfigError: If the file cannot be read or parsed
    """
    try:
        with open(path, 'r', encoding='utf-8') as fp:
            if str(path).endswith(('.yaml', '.yml')):
                conf = yaml.safe_load(fp)
            else:
                conf = json.load(fp)
    except OSError as e:
        raise ConfigError(f'Cannot read config file {path}: {e}') from e
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f'Invalid config file {path}: {e}') from e

    if conf is None:
        return {}
    if not isinstance(conf, dict):
        raise ConfigError(f'Config file {path} must contain a mapping')
    return conf


def apply_env(conf, env):
    """Overlay credentials and flags from an environment mapping

    Args:
        conf: Configuration dictionary (modified in place)
        env: Mapping such as os.environ

    Returns:
        The same configuration dictionary
    """
    providers = conf.setdefault('providers', {})
    for var, (name, key) in ENV_CREDENTIALS.items():
        value = (env.get(var) or '').strip()
        if value:
            providers.setdefault(name, {})[key] = value

    use_mocks = env.get('QUIZIAI_USE_MOCKS')
    if use_mocks is not None:
        conf['use_mocks'] = use_mocks.strip().lower() in TRUTHY

    log_level = env.get('QUIZIAI_LOG_LEVEL')
    if log_level:
        conf.setdefault('logging', {})['level'] = log_level

    return conf


def load_config(path: Optional[str] = None,
                env: Optional[Mapping[str, str]] = None) -> dict[str, Any]:
    """Load configuration from defaults, an optional file and the environment

    Later sources win: built-in defaults, then the file, then environment
    variables.

    Args:
        path: Optional JSON or YAML config file
        env: Environment mapping (defaults to os.environ)

    Returns:
        Merged configuration dictionary

    Raises:
        ConfigError: If the config file is unreadable or invalid
    """
    if env is None:
        env = os.environ

    conf = copy.deepcopy(DEFAULT_CONFIG)
    if path:
        conf = _merge(conf, read_config_file(path))

    return apply_env(conf, env)


def setup_logging(conf):
    """Configure the root logger from the 'logging' config section

    Args:
        conf: Configuration dictionary

    Returns:
        The root logger
    """
    logging_config = conf.get('logging') or {}
    log_level = parse_log_level(logging_config.get('level'))
    log_format = logging_config.get('format') or DEFAULT_LOG_FORMAT

    logging.basicConfig(level=log_level, format=log_format)
    root = logging.getLogger()
    root.setLevel(log_level)

    log_file = logging_config.get('file')
    if log_file:
        configure_logger(root, log_file=log_file, log_format=log_format, log_level=log_level)

    return root
