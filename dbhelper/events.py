from __future__ import annotations

import logging
import sys

logger = logging.getLogger("dbhelper")

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def log_event(level: str, message: str, container: str | None = None, image: str | None = None) -> None:
    """Emit one log line, tagged with the container name and image when known."""
    lvl = _LEVELS.get(level.upper(), logging.INFO)
    tags = " ".join(t for t in (container, image) if t)
    text = f"[{tags}] {message}" if tags else message
    logger.log(lvl, text, extra={"container": container, "image": image})


def configure_logging(level: str = "INFO") -> None:
    """Attach a stderr handler to the package logger (used by the CLI)."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)-7s %(name)s: %(message)s"))
    logger.handlers[:] = [handler]
    logger.setLevel(_LEVELS.get(level.upper(), logging.INFO))
    logger.propagate = False
