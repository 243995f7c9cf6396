import logging
import sys

from launchguard.config import effective_settings as config


class MainFormatter(logging.Formatter):
    """A custom formatter to handle regular logs and raw subprocess logs."""

    def format(self, record):
        # If the log is from the child process, just return the raw message.
        if record.name.startswith('proc.'):
            return record.getMessage()

        original_format = self._style._fmt
        self._style._fmt = '%(asctime)s - %(levelname)-8s - [%(name)s] - %(message)s'
        formatted_message = super().format(record)
        self._style._fmt = original_format
        return formatted_message


def resolve_log_level(verbose: bool = False) -> int:
    """
    Resolves the console log level from the configuration.

    :param verbose: If True, DEBUG is used regardless of the configured level.
    :return int: A logging level constant.
    """
    if verbose:
        return logging.DEBUG
    level = logging.getLevelName(str(config.LOG_LEVEL).upper())
    if not isinstance(level, int):
        logging.getLogger(__name__).warning(f"Unknown log level '{config.LOG_LEVEL}'. Falling back to INFO.")
        return logging.INFO
    return level


def setup_logging(console_level: int = logging.INFO) -> None:
    """
    Configures the root logger for the application.
    Clears any previously configured handlers to prevent duplication and
    installs a single console handler.

    :param console_level: The logging level for the console output (e.g., logging.INFO).
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(console_level)

    # Clear any existing handlers to prevent re-adding them on re-runs
    if root_logger.hasHandlers():
        root_logger.handlers.clear()

    # --- Console Handler ---
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(MainFormatter())
    root_logger.addHandler(console_handler)
