"""
Logging setup for the production tracker.

File log (rotating, INFO and up) in the data directory plus a console
handler. Service modules log under the ``tracker`` namespace via
``logging.getLogger(__name__)``.
"""
from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path
from typing import Union

APP_LOGGER = "prod_tracker"
LIBRARY_LOGGER = "tracker"


def setup_logging(
    log_dir: Union[str, Path],
    app_name: str = APP_LOGGER,
    level: int = logging.INFO,
) -> logging.Logger:
    """
    Configure the application and ``tracker`` loggers once.

    Args:
        log_dir: Directory for log files (created if missing)
        app_name: Application logger name, also used for the log file name
        level: Level for the loggers themselves

    Returns:
        The application logger
    """
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(app_name)

    # Avoid duplicate handlers on Streamlit reruns
    if logger.handlers:
        return logger

    file_handler = logging.handlers.RotatingFileHandler(
        log_path / f"{app_name}.log",
        maxBytes=5 * 1024 * 1024,  # 5MB
        backupCount=3,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))

    for name in (app_name, LIBRARY_LOGGER):
        lg = logging.getLogger(name)
        lg.setLevel(level)
        if name != app_name and lg.handlers:
            continue
        lg.addHandler(file_handler)
        lg.addHandler(console_handler)
        lg.propagate = False

    return logger
