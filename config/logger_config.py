# File: config/logger_config.py
# This file provides a centralized configuration for logging in the variation mapping layer.
# It defines a function that configures a logger with a shared format, optional log file rotation
# and console output, driven by environment variables when arguments are not given.

import logging  # Provides logging functionality
import os  # For handling file system paths and directories
from logging.handlers import RotatingFileHandler  # For managing rotating log files
from typing import Optional  # For optional type hinting

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
VALID_OUTPUTS = {"file", "console", "both"}


def configure_logger(
    name: Optional[str] = None,  # The name of the logger; None defaults to the root logger
    log_dir: Optional[str] = None,  # Directory for log files; falls back to VARIATION_LOG_DIR, then ./logs
    log_file: str = "variation.log",  # Name of the log file
    level: int = logging.INFO,  # Logging level (e.g., DEBUG, INFO, WARNING, ERROR)
    max_bytes: int = 10 * 1024 * 1024,  # Maximum size of a log file before rotation (default: 10 MB)
    backup_count: int = 5,  # Number of backup files to keep during log rotation
    output: Optional[str] = None,  # "file", "console" or "both"; falls back to VARIATION_LOG_OUTPUT, then "console"
) -> logging.Logger:
    """
    Configures and returns a logger instance.

    Handlers are only attached the first time a given logger is configured, so
    modules can call this at import time without duplicating log lines.

    Args:
        name (Optional[str]): Name of the logger. If None, the root logger is used.
        log_dir (Optional[str]): Directory to store log files.
        log_file (str): Name of the log file.
        level (int): Logging level (e.g., logging.INFO, logging.DEBUG).
        max_bytes (int): Maximum size of the log file before rotation.
        backup_count (int): Number of backup files to keep during rotation.
        output (Optional[str]): Where to send logs: "file", "console", or "both".

    Returns:
        logging.Logger: Configured logger instance.

    Raises:
        ValueError: If the output target is not one of "file", "console" or "both".
        RuntimeError: If the log directory or a handler cannot be set up.
    """
    output = (output or os.getenv("VARIATION_LOG_OUTPUT", "console")).lower()
    if output not in VALID_OUTPUTS:
        raise ValueError(f"Invalid log output '{output}'. Expected one of {sorted(VALID_OUTPUTS)}.")

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Check if the logger already has handlers to prevent duplicate logs
    if logger.handlers:
        return logger

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    if output in {"file", "both"}:
        log_dir = log_dir or os.getenv("VARIATION_LOG_DIR", os.path.join(os.getcwd(), "logs"))
        try:
            os.makedirs(log_dir, exist_ok=True)
            file_handler = RotatingFileHandler(
                os.path.join(log_dir, log_file), maxBytes=max_bytes, backupCount=backup_count
            )
        except OSError as e:  # Handle issues with creating log directories or files
            raise RuntimeError(f"Failed to create or access log directory '{log_dir}': {e}") from e
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    if output in {"console", "both"}:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    return logger
