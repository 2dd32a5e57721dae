"""Logging configuration for the job tracker."""

import logging
import sys

from jobtracker.config import Config

# Track if logging has been configured
_configured = False


def setup_logging(config: Config) -> logging.Logger:
    """Configure the root logger from the application config.

    Safe to call more than once; later calls only update the level.
    """
    global _configured

    root = logging.getLogger()
    log_level = getattr(logging, config.LOG_LEVEL.upper(), logging.INFO)
    root.setLevel(log_level)

    if not _configured:
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(log_level)
        handler.setFormatter(logging.Formatter(config.LOG_FORMAT))
        root.addHandler(handler)
        _configured = True
    else:
        for handler in root.handlers:
            handler.setLevel(log_level)

    return root


def get_logger(name: str) -> logging.Logger:
    """Get a module logger."""
    return logging.getLogger(name)
