import logging

import json_log_formatter

from autokatalog.config import Settings

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def build_formatter(settings: Settings) -> logging.Formatter:
    if settings.log_format == "json":
        return json_log_formatter.VerboseJSONFormatter()
    return logging.Formatter(TEXT_FORMAT)


def setup_logging(settings: Settings) -> None:
    """Configure the root logger from the service settings."""
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    handler = logging.StreamHandler()
    handler.setFormatter(build_formatter(settings))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]

    # SQL echo is controlled by Settings.echo_sql, not by the root level
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
