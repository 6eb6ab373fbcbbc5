from __future__ import annotations

import logging
from typing import Any

from encuestas.core.observability import get_correlation_id

operational_logger = logging.getLogger("encuestas.operational_error")


def log_operational_error(
    message: str,
    *,
    exc: BaseException | None = None,
    extra: dict[str, Any] | None = None,
) -> None:
    """Registra en error_operativo.log un fallo que el usuario solo verá agregado."""
    metadata = dict(extra or {})
    correlation_id = metadata.get("correlation_id") or get_correlation_id()
    if correlation_id:
        metadata["correlation_id"] = correlation_id
    exc_info: Any = False
    if exc is not None:
        exc_info = (type(exc), exc, exc.__traceback__)
    operational_logger.error(
        message,
        exc_info=exc_info,
        extra={"correlation_id": correlation_id, "extra": metadata},
    )
