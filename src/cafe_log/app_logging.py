"""Logging configuration helpers."""

import logging

# supabase-py logs every PostgREST/GoTrue request through these at INFO.
_NOISY_LOGGERS = ("httpx", "httpcore", "hpack")


def configure_logging(environment: str = "local") -> None:
    """Configure the cafe_log logger once and quiet HTTP client chatter."""
    logger = logging.getLogger("cafe_log")
    logger.setLevel(logging.DEBUG if environment == "local" else logging.INFO)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s: %(name)s: %(message)s")
    )
    logger.addHandler(handler)
    logger.propagate = False
