# shopcompare/logger.py
"""
Process-wide logging, configured once from the environment.

LOG_LEVEL picks the level. LOG_TO_STDOUT (on by default) and LOG_TO_FILE
(off by default) pick the sinks; the file sink writes LOG_FILE and rotates
at LOG_MAX_BYTES, keeping LOG_BACKUPS old files.
"""
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import List, Optional

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
DEFAULT_LOG_FILE = "/data/shopcompare.log"

_configured = False


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _build_handlers(
    level: int,
    to_stdout: bool,
    log_file: Optional[str] = None,
    max_bytes: int = 2 * 1024 * 1024,
    backups: int = 3,
) -> List[logging.Handler]:
    handlers: List[logging.Handler] = []
    if to_stdout:
        handlers.append(logging.StreamHandler(sys.stdout))
    if log_file:
        try:
            os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
            handlers.append(
                RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backups)
            )
        except OSError as e:
            logging.getLogger(__name__).warning(
                "File logging disabled, cannot open %s: %s", log_file, e
            )

    formatter = logging.Formatter(LOG_FORMAT)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
    return handlers


def setup_logging() -> None:
    global _configured
    if _configured:
        return

    level = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(level)

    # Leave handlers installed by a host application (or pytest) alone
    if not root.handlers:
        log_file = None
        if _env_flag("LOG_TO_FILE", False):
            log_file = os.getenv("LOG_FILE", DEFAULT_LOG_FILE)
        for handler in _build_handlers(
            level,
            _env_flag("LOG_TO_STDOUT", True),
            log_file,
            int(os.getenv("LOG_MAX_BYTES", str(2 * 1024 * 1024))),
            int(os.getenv("LOG_BACKUPS", "3")),
        ):
            root.addHandler(handler)

    _configured = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    setup_logging()
    return logging.getLogger(name)
