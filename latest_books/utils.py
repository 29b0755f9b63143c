"""
Utility functions for the Latest Books tool.

This module provides:
- Central logging configuration
- Environment variable helpers
- Text cleanup shared by the record locator and the normalizer
"""

import logging
import os
import re
import sys
from typing import Optional


# Runs of ASCII whitespace only; U+00A0 is significant in catalog cells
_ASCII_WHITESPACE_RE = re.compile(r"[ \t\n\r\f\v]+")
_ASCII_WHITESPACE = " \t\n\r\f\v"


def setup_logging(level: str = "INFO") -> logging.Logger:
    """
    Configure and return the root logger for the application.

    Log records are written to stderr; stdout is reserved for the
    per-author report.

    Args:
        level: Logging level as string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               Defaults to INFO.

    Returns:
        Configured logger instance.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stderr)
        ]
    )

    logger = logging.getLogger("latest_books")
    logger.setLevel(log_level)

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the specified name.

    Args:
        name: Name for the logger, typically the module name.

    Returns:
        Logger instance configured as a child of the main application logger.
    """
    return logging.getLogger(f"latest_books.{name}")


def get_env_var(name: str, required: bool = True, default: Optional[str] = None) -> Optional[str]:
    """
    Get an environment variable with optional requirement enforcement.

    Args:
        name: Name of the environment variable.
        required: If True, raises ValueError when variable is not set.
                  Defaults to True.
        default: Default value if variable is not set and not required.

    Returns:
        Value of the environment variable or default.

    Raises:
        ValueError: If required=True and the variable is not set.
    """
    value = os.environ.get(name)

    if value is None or value.strip() == "":
        if required:
            raise ValueError(f"Required environment variable '{name}' is not set")
        return default

    return value.strip()


def compact_whitespace(text: Optional[str]) -> str:
    """
    Collapse runs of ASCII whitespace to a single space and trim the ends.

    Non-breaking spaces are left untouched.

    Args:
        text: Raw text to clean.

    Returns:
        Cleaned text string.
    """
    if not text:
        return ""

    cleaned = _ASCII_WHITESPACE_RE.sub(" ", text)
    return cleaned.strip(_ASCII_WHITESPACE)
