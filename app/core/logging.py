from __future__ import annotations

import logging

from app.core.config import get_settings

_configured = False


def configure_logging(level: str | None = None) -> None:
    global _configured
    if _configured:
        return

    settings = get_settings()
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format=settings.log_format,
    )
    # SQL echo stays off unless explicitly raised by the operator.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    _configured = True
