"""Logging setup for cascade-auth

Configures the root logger from Settings. Library modules only create
module-level loggers; applications call configure_logging() once at startup.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Optional

from cascade_auth.config.settings import Settings, get_settings

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class JsonFormatter(logging.Formatter):
    """One JSON object per log line"""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "logger": record.name,
            "level": record.levelname,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Configure root logging from settings.

    Args:
        settings: Settings to use (defaults to get_settings())

    Raises:
        ValueError: If log_format is neither "text" nor "json"
    """
    settings = settings or get_settings()
    log_format = settings.log_format.lower()

    handler = logging.StreamHandler()
    if log_format == "json":
        handler.setFormatter(JsonFormatter())
    elif log_format == "text":
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    else:
        raise ValueError(f"Unknown log_format: {settings.log_format}. Valid options: text, json")

    logging.basicConfig(
        level=settings.log_level.upper(),
        handlers=[handler],
        force=True,
    )
