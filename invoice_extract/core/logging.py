import sys
from loguru import logger
from .config import settings

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan> | {message} | {extra}"
)


def setup_logging():
    """Replace loguru's default sink with one configured from settings."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level.upper(),
        format=LOG_FORMAT,
        serialize=settings.log_json,
        backtrace=False,
        diagnose=not settings.is_production,
    )
    return logger
