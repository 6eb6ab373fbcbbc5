from __future__ import annotations

import json
import logging
import time
from typing import Any, Callable

import requests

from encuestas.bootstrap.settings import DEFAULT_HTTP_TIMEOUT_SECONDS, DEFAULT_RETRY_DELAY_MS
from encuestas.domain.sync_models import RespuestaApi
from encuestas.infrastructure.api_errors import error_for_status, is_success_status, map_requests_exception

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json", "Accept": "application/json"}

BaseUrlProvider = Callable[[], str]


def parse_response_body(response: requests.Response) -> Any:
    """JSON cuando se puede; si no, el texto crudo."""
    text = response.text
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        return text


class RequestsApiClient:
    """Cliente REST de la API de clientes con reintentos de intervalo fijo."""

    def __init__(
        self,
        base_url: str | BaseUrlProvider,
        *,
        session: requests.Session | None = None,
        timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
        retry_delay_seconds: float = DEFAULT_RETRY_DELAY_MS / 1000,
        sleeper: Callable[[float], None] = time.sleep,
    ) -> None:
        self._base_url_provider: BaseUrlProvider = base_url if callable(base_url) else (lambda: base_url)
        self._session = session or requests.Session()
        self._timeout_seconds = timeout_seconds
        self._retry_delay_seconds = retry_delay_seconds
        self._sleeper = sleeper

    @property
    def base_url(self) -> str:
        return (self._base_url_provider() or "").rstrip("/")

    def url_for(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    def post_json(self, path: str, body: Any, *, retries: int = 1) -> RespuestaApi:
        url = self.url_for(path)
        last_error: Exception | None = None
        attempts = 0
        for attempt in range(retries + 1):
            attempts = attempt + 1
            try:
                response = self._session.post(
                    url,
                    data=json.dumps(body, ensure_ascii=False).encode("utf-8"),
                    headers=JSON_HEADERS,
                    timeout=self._timeout_seconds,
                )
                parsed = parse_response_body(response)
                if not is_success_status(response.status_code):
                    raise error_for_status(response.status_code, parsed)
                return RespuestaApi(ok=True, data=parsed, status=response.status_code, intentos=attempts)
            except Exception as exc:  # noqa: BLE001
                last_error = map_requests_exception(exc)
                logger.warning(
                    "POST %s falló (intento %s/%s): %s",
                    url,
                    attempts,
                    retries + 1,
                    last_error,
                )
                if attempt < retries:
                    self._sleeper(self._retry_delay_seconds)
        return RespuestaApi(
            ok=False,
            error=str(last_error) if last_error else None,
            status=getattr(last_error, "status", None),
            intentos=attempts,
        )

    def get_json(self, path: str) -> RespuestaApi:
        url = self.url_for(path)
        try:
            response = self._session.get(url, headers={"Accept": "application/json"}, timeout=self._timeout_seconds)
            parsed = parse_response_body(response)
            if not is_success_status(response.status_code):
                raise error_for_status(response.status_code, parsed)
            return RespuestaApi(ok=True, data=parsed, status=response.status_code, intentos=1)
        except Exception as exc:  # noqa: BLE001
            mapped = map_requests_exception(exc)
            logger.warning("GET %s falló: %s", url, mapped)
            return RespuestaApi(ok=False, error=str(mapped), status=getattr(mapped, "status", None), intentos=1)
