from __future__ import annotations

import logging
from typing import Any

import requests

from encuestas.bootstrap.settings import DEFAULT_HTTP_TIMEOUT_SECONDS
from encuestas.domain.models import MetadatosModelo, meta_filename, modelo_filename
from encuestas.domain.ports import ApiClientPort
from encuestas.infrastructure.api_client import parse_response_body
from encuestas.infrastructure.api_errors import ApiError, error_for_status, is_success_status, map_requests_exception

logger = logging.getLogger(__name__)


class ApiModelSource:
    """``GET {apiBase}/{coleccion}``; la API no publica metadatos."""

    def __init__(self, api_client: ApiClientPort) -> None:
        self._api_client = api_client

    def fetch_metadata(self, modelo: str) -> MetadatosModelo | None:
        return None

    def fetch_coleccion(self, modelo: str) -> Any:
        respuesta = self._api_client.get_json(modelo)
        if not respuesta.ok:
            raise ApiError(respuesta.error or f"No se pudo descargar {modelo}", status=respuesta.status)
        return respuesta.data


class StaticAssetModelSource:
    """Ficheros estáticos ``{remoteBase}{coleccion}.json`` y ``.meta.json``."""

    def __init__(
        self,
        remote_base: str,
        *,
        session: requests.Session | None = None,
        timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
    ) -> None:
        self._remote_base = remote_base if remote_base.endswith("/") else remote_base + "/"
        self._session = session or requests.Session()
        self._timeout_seconds = timeout_seconds

    def _get(self, filename: str) -> Any:
        try:
            response = self._session.get(f"{self._remote_base}{filename}", timeout=self._timeout_seconds)
        except requests.exceptions.RequestException as exc:
            raise map_requests_exception(exc) from exc
        parsed = parse_response_body(response)
        if not is_success_status(response.status_code):
            raise error_for_status(response.status_code, parsed)
        return parsed

    def fetch_metadata(self, modelo: str) -> MetadatosModelo | None:
        try:
            return MetadatosModelo.from_payload(self._get(meta_filename(modelo)))
        except Exception as exc:  # noqa: BLE001
            logger.info("Metadatos remotos de %s no disponibles: %s", modelo, exc)
            return None

    def fetch_coleccion(self, modelo: str) -> Any:
        return self._get(modelo_filename(modelo))
