import logging

from truthguard.core.config import LOG_LEVEL


def configure_logging(level: str = LOG_LEVEL):
    """Configure root logging once for the whole service."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
