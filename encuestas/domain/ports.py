from __future__ import annotations

from typing import Any, Protocol

from encuestas.domain.models import ApiConfig, MetadatosModelo
from encuestas.domain.sync_models import RespuestaApi


class AlmacenamientoJsonPort(Protocol):
    @property
    def es_duradero(self) -> bool:
        ...

    def read_json(self, name: str, fallback: Any = None) -> Any:
        ...

    def write_json(self, name: str, value: Any) -> None:
        ...

    def exists(self, name: str) -> bool:
        ...

    def remove(self, name: str) -> None:
        ...


class ConectividadPort(Protocol):
    def is_connected(self) -> bool:
        ...


class ApiClientPort(Protocol):
    @property
    def base_url(self) -> str:
        ...

    def url_for(self, path: str) -> str:
        ...

    def post_json(self, path: str, body: Any, *, retries: int = 1) -> RespuestaApi:
        ...

    def get_json(self, path: str) -> RespuestaApi:
        ...


class FuenteModelosPort(Protocol):
    def fetch_metadata(self, modelo: str) -> MetadatosModelo | None:
        ...

    def fetch_coleccion(self, modelo: str) -> Any:
        ...


class ClientesObserverPort(Protocol):
    def notify_changed(self) -> None:
        ...


class ApiConfigStorePort(Protocol):
    def load(self) -> ApiConfig | None:
        ...

    def save(self, config: ApiConfig) -> ApiConfig:
        ...

    def clear(self) -> None:
        ...
