"""
Logging module for the application.
This module provides functionality to set up console logging and to resolve
the configured log level.
"""

from .setup import setup_logging, resolve_log_level

__all__ = ["setup_logging", "resolve_log_level"]
