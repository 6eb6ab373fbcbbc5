from __future__ import annotations

from typing import Any

import requests

from encuestas.core.errors import ExternalServiceError, InfraError, TransientExternalError


class ApiConfigError(InfraError):
    pass


class ApiError(ExternalServiceError):
    def __init__(self, message: str, *, status: int | None = None, body: Any = None) -> None:
        super().__init__(message)
        self.status = status
        self.body = body


class ApiHttpError(ApiError):
    pass


class ApiTransientError(TransientExternalError):
    def __init__(self, message: str, *, status: int | None = None, body: Any = None) -> None:
        super().__init__(message)
        self.status = status
        self.body = body


_TRANSIENT_STATUS = {408, 429, 500, 502, 503, 504}


def is_success_status(status: int | None) -> bool:
    """Solo 2xx; ``requests`` da por buenas también las 3xx no seguidas."""
    return status is not None and 200 <= status < 300


def is_transient_status(status: int | None) -> bool:
    return status in _TRANSIENT_STATUS


def error_for_status(status: int, body: Any) -> Exception:
    message = f"HTTP {status}"
    if is_transient_status(status):
        return ApiTransientError(message, status=status, body=body)
    return ApiHttpError(message, status=status, body=body)


def map_requests_exception(ex: Exception) -> Exception:
    if isinstance(ex, (ApiError, ApiTransientError)):
        return ex
    if isinstance(ex, (requests.exceptions.ConnectionError, requests.exceptions.Timeout)):
        return ApiTransientError(f"Sin respuesta de la API: {ex}")
    if isinstance(ex, requests.exceptions.InvalidURL | requests.exceptions.MissingSchema):
        return ApiConfigError(f"URL de la API no válida: {ex}")
    if isinstance(ex, requests.exceptions.RequestException):
        return ApiError(str(ex))
    return ApiError(str(ex))
