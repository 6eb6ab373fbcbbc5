from __future__ import annotations

from contextlib import AbstractContextManager
from contextvars import ContextVar, Token
from datetime import datetime, timezone
import uuid
from typing import Any

_CORRELATION_ID: ContextVar[str | None] = ContextVar("correlation_id", default=None)
_OPERACION: ContextVar[str | None] = ContextVar("operacion", default=None)


def generate_correlation_id() -> str:
    return str(uuid.uuid4())


def get_correlation_id() -> str | None:
    return _CORRELATION_ID.get()


def get_operacion() -> str | None:
    return _OPERACION.get()


class OperationContext(AbstractContextManager["OperationContext"]):
    """Agrupa bajo un mismo correlation_id los eventos de una ejecución de pull o push.

    Si ya existe un correlation_id activo (p. ej. el push lanzado dentro del
    arranque) se reutiliza para que toda la traza quede enlazada; la operación
    activa pasa a ser la más interna.
    """

    def __init__(self, operation_name: str) -> None:
        self.operation_name = operation_name
        self.correlation_id = get_correlation_id() or generate_correlation_id()
        self._tokens: tuple[Token[str | None], Token[str | None]] | None = None

    def __enter__(self) -> "OperationContext":
        self._tokens = (_CORRELATION_ID.set(self.correlation_id), _OPERACION.set(self.operation_name))
        return self

    def __exit__(self, exc_type: object, exc: object, exc_tb: object) -> None:
        if self._tokens is not None:
            correlation_token, operacion_token = self._tokens
            _OPERACION.reset(operacion_token)
            _CORRELATION_ID.reset(correlation_token)
            self._tokens = None
        return None


def log_event(logger: Any, event_name: str, payload: dict[str, Any], correlation_id: str | None = None) -> dict[str, Any]:
    resolved_correlation_id = correlation_id or get_correlation_id()
    event = {
        "event": event_name,
        "operacion": get_operacion(),
        "correlation_id": resolved_correlation_id,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "payload": payload,
    }
    logger.info(event_name, extra={"correlation_id": resolved_correlation_id, "extra": event})
    return event
