"""Common logging framework for all projects."""

import logging
import sys
from datetime import datetime
from logging import Logger
from pathlib import Path
from typing import Any, Optional, Sequence

from common.config import BaseConfig

# Custom AUDIT log level between DEBUG (10) and INFO (20)
AUDIT_LEVEL = 15
logging.addLevelName(AUDIT_LEVEL, "AUDIT")


def audit(self, message, *args, **kwargs):
    if self.isEnabledFor(AUDIT_LEVEL):
        self._log(AUDIT_LEVEL, message, args, **kwargs)


logging.Logger.audit = audit

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_logger(name: str) -> Logger:
    """Get a logger instance.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def timestamped_name(script_name: str) -> str:
    """Build a per-run logger name such as ``mediasort_20240101_120000``."""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"{script_name}_{timestamp}"


class ScriptLogging:
    """Simplified logging setup for standalone scripts."""

    @staticmethod
    def get_script_logger(
        name: Optional[str] = None,
        log_dir: Optional[Path] = None,
        debug: bool = False,
        config: Optional[Any] = None,
        quiet: bool = False,
        packages: Sequence[str] = (),
    ) -> Logger:
        """Get a logger writing to the console and to a per-run log file.

        Console output is INFO and above (DEBUG with ``debug``, WARNING with
        ``quiet``). The log file always receives DEBUG and AUDIT records.

        Args:
            name: Logger name (defaults to ``script_<timestamp>``)
            log_dir: Directory for log files (defaults to ``config.log_dir``)
            debug: Enable debug output on the console
            config: Optional BaseConfig instance (creates default if None)
            quiet: Only show warnings and errors on the console
            packages: Library loggers (e.g. "mediasort") routed to the same
                handlers

        Returns:
            Configured logger instance
        """
        if config is None:
            config = BaseConfig()
        if name is None:
            name = timestamped_name("script")
        if log_dir is None:
            log_dir = Path(getattr(config, "log_dir", ".log"))

        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / f"{name}.log"

        logger = logging.getLogger(name)
        logger.setLevel(logging.DEBUG)
        logger.propagate = False

        # Clear any existing handlers to avoid duplicates
        for handler in list(logger.handlers):
            handler.close()
        logger.handlers.clear()

        formatter = logging.Formatter(config.log_format, datefmt=DATE_FORMAT)

        if debug:
            console_level = logging.DEBUG
        elif quiet:
            console_level = logging.WARNING
        else:
            console_level = logging.INFO

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(console_level)
        # AUDIT records are per-item transactions; keep them out of the console
        console_handler.addFilter(
            lambda record: debug or record.levelno != AUDIT_LEVEL
        )
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

        for package in packages:
            package_logger = logging.getLogger(package)
            package_logger.setLevel(logging.DEBUG)
            package_logger.propagate = False
            package_logger.handlers[:] = [console_handler, file_handler]

        # DEBUG header: file only unless debug is on
        logger.debug("=" * 80)
        logger.debug(f"LOG FILE: {log_file}")
        logger.debug(f"SCRIPT: {name}")
        logger.debug(f"DEBUG MODE: {debug}")
        logger.debug("=" * 80)

        return logger
