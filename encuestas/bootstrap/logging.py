from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from encuestas.core.observability import get_correlation_id
from encuestas.core.redactor_secretos import LoggingSecretsFilter

DEFAULT_LOG_MAX_BYTES = 1_048_576
DEFAULT_LOG_BACKUP_COUNT = 10
MAIN_LOG_NAME = "seguimiento.log"
ERROR_OPERATIVO_LOG_NAME = "error_operativo.log"
CRASH_LOG_NAME = "crash.log"


class JsonLinesFormatter(logging.Formatter):
    """Una línea JSON por evento para que soporte pueda seguir un push paso a paso."""

    def format(self, record: logging.LogRecord) -> str:
        event: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "modulo": record.module,
            "funcion": record.funcName,
            "mensaje": record.getMessage(),
            "correlation_id": getattr(record, "correlation_id", None) or get_correlation_id(),
        }
        extra = getattr(record, "extra", None)
        if isinstance(extra, dict) and extra:
            event["extra"] = extra
        if record.exc_info:
            event["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(event, ensure_ascii=False, default=str)


class LevelOnlyFilter(logging.Filter):
    """Deja pasar un único nivel: los CRITICAL no se mezclan con los errores operativos."""

    def __init__(self, level: int) -> None:
        super().__init__()
        self._level = level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno == self._level


def _ficheros_de_log(level: int) -> list[tuple[str, int, logging.Filter | None]]:
    return [
        (MAIN_LOG_NAME, level, None),
        (ERROR_OPERATIVO_LOG_NAME, logging.ERROR, LevelOnlyFilter(logging.ERROR)),
        (CRASH_LOG_NAME, logging.CRITICAL, None),
    ]


def configure_logging(
    log_dir: Path,
    *,
    max_bytes: int = DEFAULT_LOG_MAX_BYTES,
    backup_count: int = DEFAULT_LOG_BACKUP_COUNT,
    level: int = logging.INFO,
    console: bool = False,
) -> None:
    log_dir.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()
    root_logger.setLevel(level)

    for nombre, nivel, filtro in _ficheros_de_log(level):
        handler = RotatingFileHandler(log_dir / nombre, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
        handler.setLevel(nivel)
        handler.setFormatter(JsonLinesFormatter())
        handler.addFilter(LoggingSecretsFilter())
        if filtro is not None:
            handler.addFilter(filtro)
        root_logger.addHandler(handler)

    if console:
        # Solo avisos en consola; las trazas completas quedan en disco.
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        console_handler.addFilter(LoggingSecretsFilter())
        root_logger.addHandler(console_handler)
