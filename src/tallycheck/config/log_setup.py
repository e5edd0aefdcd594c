from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | int = "WARNING") -> logging.Logger:
    """Attach a stream handler to the package logger; repeated calls only change the level."""

    package_logger = logging.getLogger("tallycheck")
    package_logger.setLevel(level)

    if not any(getattr(handler, "_tallycheck", False) for handler in package_logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._tallycheck = True  # type: ignore[attr-defined]
        package_logger.addHandler(handler)

    return package_logger
