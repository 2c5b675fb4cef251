"""
Logging utilities for rosa-network.
"""
import logging
import logging.handlers
import os
from typing import Any, Dict, Optional, Union
from pathlib import Path


def setup_logging(
    log_dir: Optional[str] = None,
    level: int = logging.INFO,
    log_to_console: bool = True,
    log_to_file: bool = False,
    log_filename: str = "rosa_network.log",
    max_bytes: int = 10485760,  # 10MB
    backup_count: int = 5,
) -> logging.Logger:
    """Set up logging configuration.

    Args:
        log_dir: Directory to store log files. If None, use 'logs' in current directory.
        level: Logging level.
        log_to_console: Whether to log to console (standard error).
        log_to_file: Whether to log to file.
        log_filename: Log file name.
        max_bytes: Maximum log file size before rotating.
        backup_count: Number of backup log files to keep.

    Returns:
        Configured logger.
    """
    # Create logger
    logger = logging.getLogger()
    logger.setLevel(level)

    # Create formatters
    file_formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    console_formatter = logging.Formatter("%(levelname)s: %(message)s")

    # Remove existing handlers
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    # Add console handler
    if log_to_console:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(console_formatter)
        logger.addHandler(console_handler)

    # Add file handler
    if log_to_file:
        if log_dir is None:
            log_dir = "logs"

        log_path = Path(log_dir)
        os.makedirs(log_path, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_path / log_filename, maxBytes=max_bytes, backupCount=backup_count
        )
        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)

    # botocore is chatty at DEBUG
    logging.getLogger("botocore").setLevel(max(level, logging.WARNING))
    logging.getLogger("urllib3").setLevel(max(level, logging.WARNING))

    return logger


def setup_logging_from_config(logging_config: Dict[str, Any], debug: bool = False) -> logging.Logger:
    """Set up logging from the ``logging`` section of the configuration.

    Args:
        logging_config: Logging configuration section.
        debug: Force DEBUG level.

    Returns:
        Configured logger.
    """
    level: Union[int, str] = logging.DEBUG if debug else logging_config.get("level", "INFO")
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    return setup_logging(
        log_dir=logging_config.get("log_dir"),
        level=level,
        log_to_console=logging_config.get("log_to_console", True),
        log_to_file=logging_config.get("log_to_file", False),
        log_filename=logging_config.get("log_filename", "rosa_network.log"),
    )
