from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Callable

import requests

from encuestas.bootstrap.settings import resolve_appdata_dir
from encuestas.domain.models import ApiConfig
from encuestas.infrastructure.api_errors import ApiConfigError, is_success_status

logger = logging.getLogger(__name__)

URL_BASE_KEY = "url_base"
PROBE_ENDPOINT = "clientes"

_SCHEME_SIN_BARRA = re.compile(r"^(https?):/([^/])")


def normalize_url(url: str | None) -> str:
    """Añade esquema, repara ``http:/host`` y elimina la barra final."""
    if not url or not isinstance(url, str):
        return ""
    base = _SCHEME_SIN_BARRA.sub(r"\1://\2", url.strip())
    if not base:
        return ""
    if not base.startswith(("http://", "https://")):
        base = "http://" + base
    return base.rstrip("/")


def validate_api_url(url: str, *, session: requests.Session | None = None, timeout_seconds: float = 10.0) -> bool:
    normalized = normalize_url(url)
    if not normalized:
        return False
    client = session or requests
    try:
        response = client.get(
            f"{normalized}/{PROBE_ENDPOINT}",
            headers={"Accept": "application/json"},
            timeout=timeout_seconds,
        )
    except requests.exceptions.RequestException as exc:
        logger.info("La URL %s no respondió al sondeo: %s", normalized, exc)
        return False
    return is_success_status(response.status_code)


class ApiConfigStore:
    def __init__(self, base_dir: Path | None = None) -> None:
        self._base_dir = base_dir or resolve_appdata_dir()
        self._config_path = self._base_dir / "config.json"

    def load(self) -> ApiConfig | None:
        if not self._config_path.exists():
            return None
        try:
            payload = json.loads(self._config_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.exception("No se pudo leer config.json: %s", exc)
            return None
        if not isinstance(payload, dict):
            return None
        url_base = normalize_url(str(payload.get(URL_BASE_KEY, "")))
        if not url_base:
            return None
        return ApiConfig(url_base=url_base)

    def save(self, config: ApiConfig) -> ApiConfig:
        payload = {URL_BASE_KEY: normalize_url(config.url_base)}
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        self._config_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        return ApiConfig(url_base=payload[URL_BASE_KEY])

    def clear(self) -> None:
        self._config_path.unlink(missing_ok=True)


class ApiBaseUrlService:
    """Persistencia validada de la URL base de la API."""

    def __init__(
        self,
        store: ApiConfigStore,
        default_url: str,
        *,
        validator: Callable[[str], bool] = validate_api_url,
    ) -> None:
        self._store = store
        self._default_url = default_url
        self._validator = validator

    def set_api_base_url(self, url: str) -> str:
        normalized = normalize_url(url)
        if not normalized or not self._validator(normalized):
            raise ApiConfigError(
                f"No se pudo validar la URL de la API. Verifica que el servidor esté activo: {normalized}"
            )
        return self._store.save(ApiConfig(url_base=normalized)).url_base

    def get_api_base_url(self) -> str | None:
        config = self._store.load()
        return config.url_base if config else None

    def get_api_base_url_or_default(self) -> str:
        return self.get_api_base_url() or normalize_url(self._default_url)

    def clear_api_base_url(self) -> None:
        self._store.clear()
