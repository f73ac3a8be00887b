"""
Logging configuration for the verification engine.

ClaimVerifier.from_config applies the configured level and optional log
file; every engine module logs under the 'verification' namespace.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Client libraries that log every request at INFO/DEBUG
TRANSPORT_LOGGERS = ('urllib3', 'aiohttp', 'google')


def _resolve_level(level: str) -> int:
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    console: bool = True
) -> logging.Logger:
    """
    Configure the 'verification' logger.

    Calling it again replaces the previous handlers, so a verifier rebuilt
    from fresh configuration never logs twice.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path; parent directories are created
        console: Whether to log to stdout

    Returns:
        The configured 'verification' logger
    """
    numeric_level = _resolve_level(level)
    logger = logging.getLogger('verification')
    logger.setLevel(numeric_level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handlers = []
    if console:
        handlers.append(logging.StreamHandler(sys.stdout))
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    formatter = logging.Formatter(LOG_FORMAT)
    for handler in handlers:
        handler.setLevel(numeric_level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    transport_level = logging.DEBUG if numeric_level <= logging.DEBUG else logging.WARNING
    for name in TRANSPORT_LOGGERS:
        logging.getLogger(name).setLevel(transport_level)

    return logger


def get_logger(name: str = 'verification') -> logging.Logger:
    """Logger under the verification namespace ('pipeline' -> 'verification.pipeline')."""
    if name == 'verification' or name.startswith('verification.'):
        return logging.getLogger(name)
    return logging.getLogger(f'verification.{name}')
