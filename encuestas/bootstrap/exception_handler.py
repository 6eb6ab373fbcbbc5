from __future__ import annotations

import json
import logging
import sys
import traceback
import uuid
from datetime import datetime, timezone
from pathlib import Path
from types import TracebackType

from encuestas.bootstrap.logging import CRASH_LOG_NAME
from encuestas.bootstrap.settings import resolve_log_dir
from encuestas.core.observability import generate_correlation_id, get_correlation_id

logger = logging.getLogger("encuestas.global_exception")


def generar_id_incidente() -> str:
    return f"INC-{uuid.uuid4().hex[:12].upper()}"


def _logging_configurado() -> bool:
    return bool(logging.getLogger().handlers)


def _escribir_incidente_directo(
    log_dir: Path,
    payload: dict[str, object],
) -> Path:
    log_dir.mkdir(parents=True, exist_ok=True)
    crash_path = log_dir / CRASH_LOG_NAME
    with crash_path.open("a", encoding="utf-8") as handle:
        handle.write(json.dumps(payload, ensure_ascii=False, default=str) + "\n")
    return crash_path


def manejar_excepcion_global(
    exc_type: type[BaseException],
    exc_value: BaseException,
    exc_traceback: TracebackType,
    *,
    comando: str | None = None,
) -> str:
    """Registra una excepción no controlada y devuelve un id para mostrar al usuario.

    Si el fallo ocurre antes de configurar el logging (p. ej. al leer la
    configuración) el incidente se escribe directamente en ``crash.log``.
    """
    incident_id = generar_id_incidente()
    correlation_id = get_correlation_id() or generate_correlation_id()
    contexto = {"incident_id": incident_id, "comando": comando}

    if _logging_configurado():
        logger.critical(
            "Excepción no controlada. incident_id=%s",
            incident_id,
            exc_info=(exc_type, exc_value, exc_traceback),
            extra={"correlation_id": correlation_id, "extra": contexto},
        )
        return incident_id

    try:
        _escribir_incidente_directo(
            resolve_log_dir(),
            {
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "level": "CRITICAL",
                "correlation_id": correlation_id,
                "extra": contexto,
                "mensaje": f"{exc_type.__name__}: {exc_value}",
                "exc_info": "".join(traceback.format_exception(exc_type, exc_value, exc_traceback)),
            },
        )
    except OSError:
        # Sin disco no queda dónde dejar rastro; el id sigue siendo útil para soporte.
        pass
    return incident_id


def install_exception_hook() -> None:
    def _hook(exc_type: type[BaseException], exc_value: BaseException, exc_traceback: TracebackType) -> None:
        manejar_excepcion_global(exc_type, exc_value, exc_traceback)

    sys.excepthook = _hook
