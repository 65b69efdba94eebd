import logging

from medpanel.config import get_settings


def configure_logging(level: str | None = None) -> None:
    level_name = level or get_settings().log_level
    logging.basicConfig(level=getattr(logging, level_name, logging.INFO))
