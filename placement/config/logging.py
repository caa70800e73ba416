# placement/config/logging.py

import json
import logging
from datetime import datetime, timezone
from typing import Optional

from placement.config.settings import get_settings
from placement.core.context import pass_id_ctx, table_id_ctx

# Attributes every LogRecord has; anything else came in through extra=
_RESERVED = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    def format(self, record):
        log_record = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "table_id": table_id_ctx.get(),
            "pass_id": pass_id_ctx.get(),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED and not key.startswith("_"):
                log_record[key] = value
        if record.exc_info:
            log_record["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(log_record, default=str)


def configure_logging(log_level: Optional[str] = None):
    """Attach a JSON handler to the root logger. Level defaults to PLACEMENT_LOG_LEVEL."""
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level or get_settings().log_level)
    root_logger.addHandler(handler)
