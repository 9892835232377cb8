"""
Logging Module

Provides structured logging with console and optional file output for the
preprocessing pipeline. Loggers are cached per name so every module can call
``get_logger`` at import time without stacking handlers.
"""

import sys
import logging
from pathlib import Path
from datetime import datetime
from typing import Any, Dict, Optional, Union
from logging.handlers import RotatingFileHandler, TimedRotatingFileHandler


class Logger:
    """
    Logger factory with console and file handlers.

    Features:
    - Console output (stdout)
    - Optional rotating file output
    - Shared formatter across all pipeline modules

    Example:
        >>> logger = Logger.get_logger('tokenizer')
        >>> logger.info("Tokenizer ready")
    """

    _loggers: Dict[str, logging.Logger] = {}

    # Applied to loggers created after setup_logging() runs
    _defaults: Dict[str, Any] = {}

    @staticmethod
    def get_logger(
        name: str,
        log_dir: Union[str, Path] = None,
        log_file: Optional[str] = None,
        level: int = None,
        console_output: bool = None,
        file_output: bool = None,
        rotation: str = None,
    ) -> logging.Logger:
        """
        Get or create a logger instance.

        Args:
            name: Logger name (typically module name)
            log_dir: Directory to store log files
            log_file: Log file name (auto-generated if None)
            level: Logging level
            console_output: Enable console output
            file_output: Enable file output
            rotation: Rotation strategy ('size' or 'time')

        Returns:
            Configured logger instance
        """
        if name in Logger._loggers:
            return Logger._loggers[name]

        defaults = Logger._defaults
        log_dir = log_dir if log_dir is not None else defaults.get("log_dir", "logs")
        level = level if level is not None else defaults.get("level", logging.INFO)
        if console_output is None:
            console_output = defaults.get("console_output", True)
        if file_output is None:
            file_output = defaults.get("file_output", False)
        rotation = rotation or defaults.get("rotation", "size")

        logger = logging.getLogger(name)
        logger.setLevel(level)
        logger.handlers = []

        formatter = Logger._create_formatter()

        if console_output:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(level)
            console_handler.setFormatter(formatter)
            logger.addHandler(console_handler)

        if file_output:
            log_dir = Path(log_dir)
            log_dir.mkdir(parents=True, exist_ok=True)

            if log_file is None:
                timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
                log_file = f"{name}_{timestamp}.log"

            log_path = log_dir / log_file

            if rotation == 'size':
                file_handler = RotatingFileHandler(
                    log_path,
                    maxBytes=10 * 1024 * 1024,
                    backupCount=5,
                    encoding='utf-8'
                )
            else:
                file_handler = TimedRotatingFileHandler(
                    log_path,
                    when='midnight',
                    interval=1,
                    backupCount=30,
                    encoding='utf-8'
                )

            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

        logger.propagate = False

        Logger._loggers[name] = logger
        return logger

    @staticmethod
    def _create_formatter() -> logging.Formatter:
        log_format = (
            '%(asctime)s | %(levelname)-8s | %(name)s | '
            '%(filename)s:%(lineno)d | %(message)s'
        )
        return logging.Formatter(log_format, datefmt='%Y-%m-%d %H:%M:%S')

    @staticmethod
    def configure(
        level: int = logging.INFO,
        log_dir: Union[str, Path] = 'logs',
        file_output: bool = False,
        console_output: bool = True,
        rotation: str = 'size',
    ) -> None:
        """
        Set defaults for new loggers and rebuild the cached ones.

        Module-level loggers are created at import time, before the run
        configuration is known, so every cached logger gets its handlers
        replaced with ones built from the new defaults.
        """
        Logger._defaults = {
            "level": level,
            "log_dir": log_dir,
            "file_output": file_output,
            "console_output": console_output,
            "rotation": rotation,
        }
        for name in list(Logger._loggers):
            cached = Logger._loggers.pop(name)
            for handler in cached.handlers:
                handler.close()
            Logger.get_logger(name)


def get_logger(name: str, **kwargs) -> logging.Logger:
    """Convenience wrapper around Logger.get_logger."""
    return Logger.get_logger(name, **kwargs)


def setup_logging(config: Optional[Dict[str, Any]] = None) -> logging.Logger:
    """
    Apply the ``logging`` section of the pipeline config.

    Args:
        config: dict with optional keys level ('DEBUG', 'INFO', ...),
                log_dir, file_output, console_output, rotation

    Returns:
        The pipeline's root application logger
    """
    config = config or {}
    level = config.get("level", logging.INFO)
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level}")
        level = resolved

    Logger.configure(
        level=level,
        log_dir=config.get("log_dir", "logs"),
        file_output=config.get("file_output", False),
        console_output=config.get("console_output", True),
        rotation=config.get("rotation", "size"),
    )
    return Logger.get_logger("dialog_preprocessing")
