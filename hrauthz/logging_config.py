from __future__ import annotations

import logging


def configure_app_logging(level: str = "INFO") -> None:
    """
    Set the level for the hrauthz package loggers.

    Notes:
    - Plain stdlib logging; uvicorn already configures handlers.
    - Set `APP_LOG_LEVEL=DEBUG` to see individual policy denials.
    """

    normalized = level.upper()
    logging.getLogger("hrauthz").setLevel(normalized)
    # Child loggers under hrauthz.* inherit this level.
    logging.getLogger("hrauthz").propagate = True
