import logging

from skillswap.core.config import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str | int | None = None) -> None:
    """
    Installs the process-wide log format. Safe to call more than once.
    Without an explicit level, SKILLSWAP_LOG_LEVEL decides.
    """
    if level is None:
        level = get_settings().log_level.upper()
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)
