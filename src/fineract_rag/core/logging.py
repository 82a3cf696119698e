"""
Logging Setup

Installs a single stream handler on the root logger. Modules obtain their
own named loggers (``rag.indexer``, ``rag.jobs``, ...) via
``logging.getLogger`` and never configure handlers themselves.
"""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | int = "INFO") -> None:
    """
    Configure the root logger once for the process.

    Calling this again replaces the previous handler rather than stacking
    a second one, so the composition root may be rebuilt in tests.
    """
    logging.captureWarnings(True)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [handler]

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
