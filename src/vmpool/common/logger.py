"""
Logging for the vmpool package.

Only the ``vmpool`` logger tree is configured, so an embedding service keeps
control of its own root handlers. Managers attach ``vm_id``, ``action`` and
``provider`` through ``extra=``; both formatters surface them so suppressed
best-effort failures can be counted from the logs.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from vmpool.common.http_client import operation_id_ctx
from vmpool.config import Settings
from vmpool.config import settings as default_settings

PACKAGE_LOGGER = "vmpool"

# LogRecord attributes copied into structured output when a caller sets them
VM_FIELDS = ("vm_id", "action", "provider")


def vm_fields(record: logging.LogRecord) -> Dict[str, Any]:
    return {name: getattr(record, name) for name in VM_FIELDS if hasattr(record, name)}


class JsonFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "operation_id": operation_id_ctx.get(),
            **vm_fields(record),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


class OperationFormatter(logging.Formatter):
    """Plain text, prefixed with the operation id and any VM fields."""

    def format(self, record: logging.LogRecord) -> str:
        record.operation_id = operation_id_ctx.get() or "-"
        fields = vm_fields(record)
        record.vm_context = (
            " ".join(f"{k}={v}" for k, v in fields.items()) + " " if fields else ""
        )
        return super().format(record)


def setup_logging(
    settings: Optional[Settings] = None,
    *,
    service_name: Optional[str] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the vmpool logger from LOG_LEVEL / LOG_JSON.

    Args:
        settings: Settings to read; defaults to the process-wide settings
        service_name: Optional name shown in plain-text lines
        log_file: Optional path to also write logs to
    """
    if settings is None:
        settings = default_settings

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    package_logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
    package_logger.propagate = False

    if settings.log_json:
        formatter: logging.Formatter = JsonFormatter()
    else:
        prefix = f"{service_name} - " if service_name else ""
        formatter = OperationFormatter(
            f"%(asctime)s [%(operation_id)s] {prefix}%(name)s %(levelname)s "
            "%(vm_context)s%(message)s"
        )

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    for handler in handlers:
        handler.setFormatter(formatter)
        package_logger.addHandler(handler)

    package_logger.debug(
        f"vmpool logging configured (level={settings.log_level}, json={settings.log_json})"
    )
    return package_logger
