import logging
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[Union[str, Path]] = None,
    logger_name: str = "klinechart"
) -> logging.Logger:
    """
    Configure the package logger.

    Args:
        log_level: Logging level (e.g. "INFO", "WARNING", "ERROR")
        log_file: Optional file to mirror console output into
        logger_name: Logger to configure, the package root by default

    Returns:
        The configured logger
    """
    level = getattr(logging, log_level.upper(), None)
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level}")

    logger = logging.getLogger(logger_name)
    logger.setLevel(level)

    # Remove any existing handlers and close them
    if logger.hasHandlers():
        for handler in logger.handlers[:]:
            handler.close()
            logger.removeHandler(handler)

    formatter = logging.Formatter(LOG_FORMAT)

    # Add console handler
    ch = logging.StreamHandler()
    ch.setLevel(level)
    ch.setFormatter(formatter)
    logger.addHandler(ch)

    # Add file handler
    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_file)
        fh.setLevel(level)
        fh.setFormatter(formatter)
        logger.addHandler(fh)

    logger.debug(f"Logging configured at {log_level.upper()}")
    return logger


def close_logging(logger_name: str = "klinechart") -> None:
    """Detach and close every handler installed by `setup_logging`."""
    logger = logging.getLogger(logger_name)
    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)
