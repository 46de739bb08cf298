"""File logging for the package, driven by the logging settings."""

import logging
import time

from .settings import Settings

PACKAGE_LOGGER = "github_rest_invoker"

_handler: logging.Handler | None = None


class _LogFormatter(logging.Formatter):
    """Timestamped lines, optionally in UTC and tagged with the process id."""

    def __init__(self, utc: bool = False, process_id: bool = False):
        fmt = "%(asctime)s : %(levelname)s : "
        if process_id:
            fmt += "[%(process)d] "
        fmt += "%(name)s : %(message)s"
        super().__init__(fmt)
        if utc:
            self.converter = time.gmtime


def configure_logging(settings: Settings) -> logging.Handler | None:
    """Install (or remove) the package file handler according to ``settings``.

    Safe to call repeatedly; the previous handler is replaced.
    """
    global _handler

    logger = logging.getLogger(PACKAGE_LOGGER)
    if _handler is not None:
        logger.removeHandler(_handler)
        _handler.close()
        _handler = None

    # Transport libraries log every request at INFO/DEBUG
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    if settings.disable_logging:
        return None

    path = settings.resolved_log_path
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, encoding="utf-8", delay=True)
    except OSError as e:
        logger.warning("Could not open log file %s: %s", path, e)
        return None

    handler.setFormatter(
        _LogFormatter(utc=settings.log_time_as_utc, process_id=settings.log_process_id)
    )
    logger.addHandler(handler)
    if logger.level == logging.NOTSET:
        logger.setLevel(logging.INFO)
    _handler = handler
    return handler
