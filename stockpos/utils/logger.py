import logging
import sys

ROOT_LOGGER = "stockpos"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def configure_logging(level: str | int = logging.INFO) -> logging.Logger:
    """
    Install the stdout handler on the ``stockpos`` logger and set its level.

    Every ``Logger`` below is a child of it, so one call at startup decides
    what the whole service prints.  Calling it again only changes the level.
    """
    root = logging.getLogger(ROOT_LOGGER)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        root.addHandler(handler)
        root.propagate = False
    root.setLevel(level.upper() if isinstance(level, str) else level)
    return root


class Logger:
    """Named child of the ``stockpos`` logger, e.g. ``Logger("auth.service")``."""

    def __init__(self, name: str):
        # modules log at import time, before create_app picks the level
        if not logging.getLogger(ROOT_LOGGER).handlers:
            configure_logging()
        self._logger = logging.getLogger(f"{ROOT_LOGGER}.{name}")

    def info(self, msg: str, *args, **kwargs):
        self._logger.info(msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs):
        self._logger.error(msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        self._logger.warning(msg, *args, **kwargs)

    def debug(self, msg: str, *args, **kwargs):
        self._logger.debug(msg, *args, **kwargs)

    def exception(self, msg: str, *args, **kwargs):
        self._logger.exception(msg, *args, **kwargs)
