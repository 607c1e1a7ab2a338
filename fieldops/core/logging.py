from __future__ import annotations

import logging

from fieldops.core.config import get_settings


_LOG_FORMAT = "%(asctime)s level=%(levelname)s logger=%(name)s %(message)s"


def configure_logging() -> None:
    # Configure the root logger once; repeated app factories must not stack handlers.
    settings = get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    root = logging.getLogger()
    if not any(getattr(handler, "_fieldops", False) for handler in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        handler._fieldops = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    root.setLevel(level)
    # SQL echo stays off unless explicitly debugging.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
