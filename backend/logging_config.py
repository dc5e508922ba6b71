"""Logging setup for the API process."""

import logging
import os

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str | None = None) -> None:
    """Configure the root logger once. LOG_LEVEL env var wins over the default."""
    resolved = (level or os.getenv("LOG_LEVEL", "INFO")).strip().upper() or "INFO"
    root = logging.getLogger()
    if root.handlers:
        root.setLevel(resolved)
        return
    logging.basicConfig(level=resolved, format=LOG_FORMAT)
    # requests/urllib3 are chatty at INFO
    logging.getLogger("urllib3").setLevel(logging.WARNING)
