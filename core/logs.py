import logging
import os
import sys


def setup_logging():
    """Configure the tasktable logger from the environment."""
    env_level = os.getenv('TASKTABLE_LOG_LEVEL', '').upper()
    is_debug = os.getenv('TASKTABLE_DEBUG', '').lower() in ('1', 'true', 'yes')

    if is_debug:
        level = logging.DEBUG
    elif env_level:
        level = getattr(logging, env_level, logging.WARNING)
    else:
        level = logging.WARNING

    console_formatter = logging.Formatter(
        '%(levelname)-8s [%(name)s] %(message)s' if is_debug
        else '%(levelname)s: %(message)s'
    )
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(console_formatter)
    console_handler.setLevel(level)

    logger = logging.getLogger('tasktable')
    logger.setLevel(logging.DEBUG)  # handlers filter
    logger.handlers.clear()
    logger.addHandler(console_handler)

    log_file = os.getenv('TASKTABLE_LOG_FILE')
    if log_file:
        detailed = logging.Formatter(
            '[%(asctime)s] %(levelname)-8s [%(name)s:%(funcName)s:%(lineno)d] %(message)s',
            '%Y-%m-%d %H:%M:%S',
        )
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(detailed)
        file_handler.setLevel(logging.DEBUG)
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger


setup_logging()


def get_logger(name: str = None):
    """Get a logger instance for a specific module."""
    if name:
        return logging.getLogger(f'tasktable.{name}')
    return logging.getLogger('tasktable')
