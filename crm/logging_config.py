"""Shared logging setup for the CRM services, with daily file rotation."""
import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Optional, Union

from crm.config import settings

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def _file_handler(service_name: str, log_dir: str, log_level: int) -> TimedRotatingFileHandler:
    path = Path(log_dir)
    path.mkdir(parents=True, exist_ok=True)
    handler = TimedRotatingFileHandler(
        filename=str(path / f"{service_name}.log"),
        when='midnight',
        interval=1,
        backupCount=30,  # one month of history
        encoding='utf-8',
        utc=False
    )
    handler.setLevel(log_level)
    return handler


def setup_root_logging(
    service_name: str,
    log_level: Union[int, str, None] = None,
    log_dir: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the root logger so every module's records reach the same sinks.

    Args:
        service_name: Name of the service, used for the log file name (api, ...)
        log_level: Level for the root logger; defaults to settings.LOG_LEVEL
        log_dir: Directory for rotated log files; defaults to settings.LOG_DIR.
            When neither is set only the console handler is installed.

    Returns:
        The configured root logger
    """
    if log_level is None:
        log_level = settings.LOG_LEVEL
    if isinstance(log_level, str):
        log_level = logging.getLevelName(log_level.upper())
    if log_dir is None:
        log_dir = settings.LOG_DIR

    root_logger = logging.getLogger()
    # avoid duplicate handlers on re-configuration
    root_logger.handlers.clear()
    root_logger.setLevel(log_level)

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers: list[logging.Handler] = []
    if log_dir:
        handlers.append(_file_handler(service_name, log_dir, log_level))

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    handlers.append(console_handler)

    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    return root_logger
