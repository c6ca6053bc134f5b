"""
Application logging utilities.

Provides logging setup for the evaluator: a Rich console handler in
development mode and a plain stream handler otherwise. The package is silent
(NullHandler) until setup_logging() is called by the CLI or server.
"""

import logging
import sys
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme


# Custom theme for log levels
_LOG_THEME = Theme({
    "logging.level.debug": "dim cyan",
    "logging.level.info": "green",
    "logging.level.warning": "yellow",
    "logging.level.error": "bold red",
    "logging.level.critical": "bold white on red",
    "log.time": "dim",
    "log.message": "default",
    "log.path": "dim",
})

# Logs go to stderr so JSON output on stdout stays clean
_console = Console(theme=_LOG_THEME, stderr=True)

ROOT_LOGGER_NAME = 'architecture_evaluator'

DEFAULT_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Module-level cache for logger instances
_loggers: dict[str, logging.Logger] = {}


def setup_logging(
    level: str = 'INFO',
    log_format: Optional[str] = None,
    dev_mode: bool = False,
    rich_tracebacks: bool = True,
    show_path: bool = False,
) -> None:
    """
    Setup logging for the architecture_evaluator package.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Format string for the plain handler. If None, uses default format.
        dev_mode: Whether to use rich console output (default: False)
        rich_tracebacks: Whether to use rich for exception tracebacks (default: True)
        show_path: Whether to show file path in rich console logs (default: False)
    """
    if log_format is None:
        log_format = DEFAULT_LOG_FORMAT

    level_value = getattr(logging, level.upper())

    if dev_mode:
        handler: logging.Handler = RichHandler(
            console=_console,
            level=level_value,
            show_path=show_path,
            rich_tracebacks=rich_tracebacks,
            markup=False,
        )
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(log_format))
    handler.setLevel(level_value)

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level_value)
    logger.handlers.clear()
    logger.addHandler(handler)
    # Prevent propagation to root logger
    logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for an evaluator component.

    Args:
        name: Component name (e.g., 'scorer', 'providers.bedrock').
              Will be prefixed with 'architecture_evaluator.' automatically.

    Returns:
        A logging.Logger instance
    """
    full_name = f"{ROOT_LOGGER_NAME}.{name}" if name else ROOT_LOGGER_NAME

    if full_name not in _loggers:
        logger = logging.getLogger(full_name)

        # Add NullHandler to prevent "No handler found" warnings
        # when setup_logging hasn't been called
        if not logger.handlers:
            logger.addHandler(logging.NullHandler())

        _loggers[full_name] = logger

    return _loggers[full_name]


def sanitize_secret(secret: Optional[str], show_chars: int = 4) -> str:
    """
    Mask a secret for logging by showing only the first and last few characters.

    Args:
        secret: API key or token to mask
        show_chars: Number of characters to show from start and end

    Returns:
        Masked string (e.g., "sk-a...xyz9")
    """
    if not secret:
        return "<empty>"

    if len(secret) <= show_chars * 2:
        return "***"

    return f"{secret[:show_chars]}...{secret[-show_chars:]}"


# Create root logger on module import with NullHandler
_root_logger = logging.getLogger(ROOT_LOGGER_NAME)
_root_logger.addHandler(logging.NullHandler())
