import sys

from loguru import logger

LOG_LEVEL_ENV = 'MGIT_LOG_LEVEL'
DEFAULT_LEVEL = 'WARNING'
FORMAT = '<level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> | <level>{message}</level>'


def configure(level: str = DEFAULT_LEVEL):
    # Remove default handler
    logger.remove()
    logger.add(sys.stderr, format=FORMAT, level=level.upper(), colorize=None)
