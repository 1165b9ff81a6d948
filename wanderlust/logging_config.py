import logging
from logging.handlers import RotatingFileHandler
import os

LOGGER_LEVELS = {
    'app': logging.INFO,
    'error': logging.ERROR,
    'access': logging.INFO,
    'security': logging.INFO,
}


def setup_logging(log_directory='logs'):
    """Configures logging for the application."""

    os.makedirs(log_directory, exist_ok=True)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    for name, level in LOGGER_LEVELS.items():
        logger = logging.getLogger(name)
        logger.setLevel(level)
        # create_app may run more than once per process (tests, CLI)
        if any(isinstance(h, RotatingFileHandler) for h in logger.handlers):
            continue
        handler = RotatingFileHandler(f'{log_directory}/{name}.log', maxBytes=10485760, backupCount=5)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
