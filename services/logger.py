# services/logger.py
import logging
import os

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_logger(name: str) -> logging.Logger:
    """
    Console logger shared by the routers and services.
    Level comes from LOG_LEVEL (default INFO); handlers are installed once per name.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    level = (os.getenv("LOG_LEVEL") or "INFO").strip().upper()
    logger.setLevel(getattr(logging, level, logging.INFO))

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def mask(value: str, keep: int = 4) -> str:
    """'svc-writer@proj.iam…' style masking for log lines."""
    if not value:
        return "<missing>"
    if len(value) <= keep * 2:
        return "*" * len(value)
    return value[:keep] + "…" + value[-keep:]
