"""Logging configuration: console plus a per-process log file."""
from __future__ import annotations

import logging
import time
from pathlib import Path

LOG_FORMAT = "%(asctime)s.%(msecs)03d [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_LOG_DIR = "logs"

_PROCESS_START_MS = int(time.time() * 1000)


def configure_logging(level: str = "INFO", log_dir: str | Path | None = None) -> Path | None:
    """Configure the root logger.

    Args:
        level: Level name; unknown names fall back to INFO.
        log_dir: When given, log entries are also appended to
            ``<log_dir>/<process start epoch ms>.log``. Reconfiguring with
            the same directory keeps appending to the same file.

    Returns:
        Path of the log file, or None when logging to the console only.
    """
    resolved = getattr(logging, str(level).upper(), None)
    if not isinstance(resolved, int):
        resolved = logging.INFO

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    log_file: Path | None = None
    if log_dir:
        directory = Path(log_dir)
        directory.mkdir(parents=True, exist_ok=True)
        log_file = directory / f"{_PROCESS_START_MS}.log"
        handlers.append(logging.FileHandler(log_file, mode="a", encoding="utf-8"))

    logging.basicConfig(
        level=resolved,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=handlers,
        force=True,
    )

    for noisy in ("aiohttp", "aiohttp.access", "asyncio"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    return log_file
