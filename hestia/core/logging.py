import sys
from loguru import logger
from hestia.core.config import IS_PRODUCTION, LOG_FILE, LOG_LEVEL

_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} | {message}"


def setup_logging() -> None:
    logger.remove()

    # no local variable dumps in production tracebacks
    logger.add(
        sys.stdout,
        level=LOG_LEVEL,
        format=_FORMAT,
        backtrace=not IS_PRODUCTION,
        diagnose=not IS_PRODUCTION,
    )

    if LOG_FILE:
        logger.add(
            LOG_FILE,
            level=LOG_LEVEL,
            format=_FORMAT,
            rotation="10 MB",
            retention="14 days",
            compression="zip",
            enqueue=True,
            diagnose=False,
        )

    logger.info(f"Logging initialized | level={LOG_LEVEL} file={LOG_FILE or '-'}")
