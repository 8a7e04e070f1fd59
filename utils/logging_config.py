"""Logging setup shared by the CLI, the mock API and the controller.

Text output by default; newline-delimited JSON when ``PMIS_LOG_FORMAT=json``.
"""

import json
import logging

from utils.config import ClientConfig

# Extra fields copied onto JSON records when present.
_EXTRA_KEYS = (
    "resource", "epoch", "method", "path", "status", "duration_ms", "request_id",
)


class JsonFormatter(logging.Formatter):
    """Emit log records as newline-delimited JSON."""

    def format(self, record: logging.LogRecord) -> str:
        data: dict = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _EXTRA_KEYS:
            if hasattr(record, key):
                data[key] = getattr(record, key)
        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(data, default=str)


def configure_logging(cfg: ClientConfig | None = None) -> logging.Handler:
    """Install a single stream handler on the root logger.

    Returns:
        The installed handler.
    """
    cfg = cfg or ClientConfig.from_env()
    handler = logging.StreamHandler()
    if cfg.log_format == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
        )
    level = logging.getLevelName(cfg.log_level)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(handlers=[handler], level=level, force=True)
    return handler
