"""Logging configuration for the clubhouse service and CLI.

Console output always; a timestamped DEBUG log file when a log directory is
configured.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional


def setup_logging(
    log_dir: Optional[str] = None, console_level: int = logging.INFO
) -> Optional[Path]:
    """Configure root logging.

    Existing handlers on the root logger are cleared first so that calling
    this function more than once (app reload, tests) does not duplicate output.

    Args:
        log_dir: Directory for the log file. No file handler when empty.
        console_level: Minimum level for console output.

    Returns:
        Path to the log file, or None when logging to console only.
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    root.handlers.clear()

    console = logging.StreamHandler()
    console.setLevel(console_level)
    console.setFormatter(
        logging.Formatter(
            "%(asctime)s %(levelname)-5s %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    root.addHandler(console)

    log_file = None
    if log_dir:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y-%m-%d-%H%M%S")
        log_file = path / f"clubhouse-{timestamp}.log"

        file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)-5s [%(name)s] %(message)s")
        )
        root.addHandler(file_handler)

    # SQL echo is far too chatty at INFO.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    return log_file
