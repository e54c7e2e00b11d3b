"""
Logging setup for the API process and the Celery worker.

``setup_logging`` configures the root logger once with a console
handler; modules log through ``logging.getLogger(__name__)``.
"""

import logging
from typing import Optional


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> None:
    """Configure the root logger if nothing has configured it yet."""
    logger = logging.getLogger()
    if logger.handlers:
        # Already configured (test runner, uvicorn, repeated create_app calls).
        return

    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if logfile:
        file_handler = logging.FileHandler(logfile, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
