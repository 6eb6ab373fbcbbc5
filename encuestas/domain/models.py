from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

CLIENTES_FILE = "clientes.json"
RESPUESTAS_FILE = "respuestas.json"
MODELO_CLIENTES = "clientes"

CAMPO_ID_CLIENTE = "idCliente"
CAMPO_FECHA_CREACION = "fechaCreacion"
CAMPO_FECHA_SINCRONIZACION = "fechaSincronizacion"
CAMPO_SINCRONIZACION_PARCIAL = "sincronizacionParcial"

# Campos que nunca viajan a la API: identidad y marcas de sincronización locales.
CAMPOS_SOLO_LOCALES = (
    CAMPO_ID_CLIENTE,
    CAMPO_FECHA_CREACION,
    CAMPO_FECHA_SINCRONIZACION,
    CAMPO_SINCRONIZACION_PARCIAL,
)

REDES_SOCIALES_ID = {"facebook": 1, "instagram": 2, "tiktok": 3, "paginaWeb": 4}

# Nombre de colección remota -> atributo de DatosMaestros.
SLOTS_MAESTROS = {
    "categorias": "categorias",
    "preguntas": "preguntas",
    "formas-pago": "formas_pago",
    "condiciones-pago": "condiciones_pago",
    "estados": "estados",
    "municipios": "municipios",
    "parroquias": "parroquias",
    "ciudades": "ciudades",
    "redes-sociales": "redes_sociales",
}


def modelo_filename(modelo: str) -> str:
    return f"{modelo}.json"


def meta_filename(modelo: str) -> str:
    return f"{modelo}.meta.json"


def normalizar_coleccion(payload: Any) -> list[Any]:
    """Acepta tanto listas como objetos paginados con ``rows``."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        rows = payload.get("rows")
        if isinstance(rows, list):
            return rows
    return []


@dataclass(frozen=True)
class MetadatosModelo:
    """Descriptor remoto usado para evitar descargas redundantes de datos maestros."""

    fecha_creacion: str | None = None
    fecha_modificacion: str | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> "MetadatosModelo | None":
        if not isinstance(payload, dict):
            return None
        return cls(
            fecha_creacion=payload.get("fecha_creacion"),
            fecha_modificacion=payload.get("fecha_modificacion"),
        )

    def to_payload(self) -> dict[str, str | None]:
        return {"fecha_creacion": self.fecha_creacion, "fecha_modificacion": self.fecha_modificacion}

    def difiere_de(self, other: "MetadatosModelo") -> bool:
        return (
            self.fecha_creacion != other.fecha_creacion
            or self.fecha_modificacion != other.fecha_modificacion
        )


@dataclass
class DatosMaestros:
    categorias: list[Any] = field(default_factory=list)
    preguntas: list[Any] = field(default_factory=list)
    formas_pago: list[Any] = field(default_factory=list)
    condiciones_pago: list[Any] = field(default_factory=list)
    estados: list[Any] = field(default_factory=list)
    municipios: list[Any] = field(default_factory=list)
    parroquias: list[Any] = field(default_factory=list)
    ciudades: list[Any] = field(default_factory=list)
    redes_sociales: list[Any] = field(default_factory=list)
    loaded: bool = False
    loading: bool = False

    def conteos(self) -> dict[str, int]:
        return {atributo: len(getattr(self, atributo)) for atributo in SLOTS_MAESTROS.values()}


@dataclass(frozen=True)
class ApiConfig:
    url_base: str
