"""Centralized logging configuration for PySizeSpec."""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

# Package logger; silent until configure_logging() is called
logger = logging.getLogger('pysizespec')
logger.addHandler(logging.NullHandler())

formatter = logging.Formatter(
    '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)


def configure_logging(
    level: int = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
) -> logging.Logger:
    """Attach console (and optionally file) handlers to the package logger.

    Parameters
    ----------
    level : int
        Logging level for the console handler.
    log_file : str or Path, optional
        If given, also log at DEBUG level to this file. The parent
        directory is created if needed.

    Returns
    -------
    logging.Logger
        The configured package logger.
    """
    logger.setLevel(logging.DEBUG)

    # Reconfiguring replaces handlers from a previous call
    for handler in list(logger.handlers):
        if not isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)
            handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str = None):
    """Get a logger instance.

    Parameters
    ----------
    name : str, optional
        Logger name (typically __name__). If None, returns the package logger.

    Returns
    -------
    logging.Logger
        Logger under the ``pysizespec`` hierarchy
    """
    if name:
        if name == 'pysizespec' or name.startswith('pysizespec.'):
            return logging.getLogger(name)
        return logging.getLogger(f'pysizespec.{name}')
    return logger
