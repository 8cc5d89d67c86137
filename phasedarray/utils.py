from __future__ import annotations

import logging
import sys
from pathlib import Path


def setup_logging(level: int = logging.INFO, log_file: str | Path | None = None) -> None:
    """Configure logging for scripts; the library itself installs no handlers."""
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file is not None:
        handlers.append(logging.FileHandler(Path(log_file), mode="w+"))  # Overwrite log
    logging.basicConfig(
        level=level,
        format="{asctime} {levelname} {filename}:{lineno} {message}",
        style="{",
        handlers=handlers,
        force=True,
    )

    # Log the command line arguments
    logger = logging.getLogger(__name__)
    logger.info(f"python {' '.join(sys.argv)}")
