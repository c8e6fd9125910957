"""Logging for the deployer: terminal output, plus an optional file that keeps every run's INFO trail."""

import logging
import sys
from pathlib import Path
from typing import List, Optional

LOG_FORMAT = "%(asctime)s [%(levelname)-5.5s] %(name)s:%(lineno)d  %(message)s"

_PACKAGES = ("deployment_config", "ledger_client", "ramm_deployer", "ramm_cli")


def configure_logging(level: str = "INFO", log_file: Optional[Path] = None) -> List[logging.Handler]:
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")

    formatter = logging.Formatter(LOG_FORMAT)
    handlers: List[logging.Handler] = []

    terminal = logging.StreamHandler(sys.stderr)
    terminal.setFormatter(formatter)
    terminal.setLevel(numeric_level)
    handlers.append(terminal)

    file_error = None
    if log_file is not None:
        try:
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
        except OSError as exc:
            file_error = exc
            log_file = None
        else:
            file_handler.setFormatter(formatter)
            file_handler.setLevel(logging.INFO)
            handlers.append(file_handler)

    for name in _PACKAGES:
        package_logger = logging.getLogger(name)
        for handler in list(package_logger.handlers):
            package_logger.removeHandler(handler)
            handler.close()
        package_logger.setLevel(min(numeric_level, logging.INFO) if log_file is not None else numeric_level)
        package_logger.propagate = False
        for handler in handlers:
            package_logger.addHandler(handler)

    if file_error is not None:
        logging.getLogger(__name__).warning(
            "Could not open log file, logging to the terminal only: %s", file_error
        )
    return handlers
