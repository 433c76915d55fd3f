import logging
import os

logger = logging.getLogger('api')


def configure_logging(level: str = None):
    level = (level or os.getenv('LOG_LEVEL', 'INFO')).upper()
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter('%(asctime)s %(levelname)s [%(name)s] %(message)s'))
        logger.addHandler(handler)
    logger.setLevel(level)
    return logger
