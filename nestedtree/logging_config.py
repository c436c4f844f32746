"""Logging setup driven by TreeConfig."""

import logging
from typing import Optional

from nestedtree.core.config import TreeConfig, get_config
from nestedtree.paths import get_log_dir

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def resolve_log_level(config: TreeConfig) -> int:
    """
    Numeric level for a configuration: DEBUG in debug mode, log_level otherwise.

    Raises:
        ValueError: log_level is not a standard logging level name
    """
    if config.debug:
        return logging.DEBUG
    level = logging.getLevelName(config.log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level {config.log_level!r}")
    return level


def setup_logging(
    config: Optional[TreeConfig] = None,
    log_file_name: str = 'nestedtree.log',
    console_level: int = logging.ERROR
) -> logging.Logger:
    """
    Install console and file handlers on the root logger.

    Args:
        config: Configuration to follow, the global configuration when omitted
        log_file_name: Name of the log file inside config.log_dir or the platform log directory
        console_level: Console threshold outside debug mode. Debug mode echoes everything.
    """
    config = config or get_config()
    level = resolve_log_level(config)

    logger = logging.getLogger()
    logger.setLevel(level)
    logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG if config.debug else console_level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(console_handler)

    # The log directory may not be writable; console logging still works then
    try:
        log_file_path = get_log_dir(config.log_dir) / log_file_name
        file_handler = logging.FileHandler(log_file_path)
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(file_handler)
    except (PermissionError, OSError) as e:
        logging.warning(f"File logging disabled: {e}")

    logging.debug(f"Logging configured at {logging.getLevelName(level)}")
    return logger
