"""Process-wide logging setup for the dashboard."""

from __future__ import annotations

import logging
import sys

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_configured = False


def configure_logging(level: str = "INFO") -> None:
    """Install a single stdout handler on the package logger.

    Streamlit re-executes page scripts on every interaction, so repeated
    calls only adjust the level.
    """
    global _configured
    logger = logging.getLogger("construcost_dashboard")
    logger.setLevel(level)
    if _configured:
        return
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
    _configured = True
