from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

ESTADO_OK = "ok"
ESTADO_PARCIAL = "parcial"
ESTADO_FALLO = "fallo"

RAZON_SIN_CONEXION = "sin_conexion"
RAZON_ERROR_CONEXION = "error_conexion"


class EstadoCliente(str, Enum):
    """Máquina de estados de un cliente dentro de una ejecución de push."""

    PENDIENTE = "pendiente"
    CREANDO_RAIZ = "creando_raiz"
    ADJUNTANDO = "adjuntando"
    SINCRONIZADO = "sincronizado"
    FALLIDO = "fallido"


class PoliticaDependientes(str, Enum):
    RAIZ_SUFICIENTE = "raiz_suficiente"
    ESTRICTA = "estricta"

    @classmethod
    def desde_texto(cls, valor: str | None) -> "PoliticaDependientes":
        try:
            return cls((valor or "").strip().lower())
        except ValueError:
            return cls.RAIZ_SUFICIENTE


@dataclass(frozen=True)
class RespuestaApi:
    ok: bool
    data: Any = None
    error: str | None = None
    status: int | None = None
    intentos: int = 0


@dataclass
class PasoRemoto:
    paso: str
    url: str
    body: Any = None
    clave: str = ""
    ok: bool | None = None
    intentos: int = 0
    status: int | None = None
    error: str | None = None


@dataclass
class LogClientePush:
    id_local: str
    pasos: list[PasoRemoto] = field(default_factory=list)
    estado: str = ""
    estado_maquina: EstadoCliente = EstadoCliente.PENDIENTE
    id_servidor: Any = None
    fecha_sincronizacion: str | None = None

    @property
    def pasos_fallidos(self) -> list[PasoRemoto]:
        return [paso for paso in self.pasos if paso.ok is False]


@dataclass(frozen=True)
class ResumenPush:
    total: int = 0
    ok: int = 0
    parcial: int = 0
    fallo: int = 0

    @classmethod
    def desde_logs(cls, logs: list[LogClientePush]) -> "ResumenPush":
        return cls(
            total=len(logs),
            ok=sum(1 for log in logs if log.estado == ESTADO_OK),
            parcial=sum(1 for log in logs if log.estado == ESTADO_PARCIAL),
            fallo=sum(1 for log in logs if log.estado == ESTADO_FALLO),
        )

    def mensaje_usuario(self) -> str:
        if self.total == 0:
            return "No hay clientes pendientes de sincronizar."
        if self.fallo == 0 and self.parcial == 0:
            return f"Se sincronizaron {self.ok} cliente(s) correctamente."
        partes = [f"{self.ok} sincronizado(s)"]
        if self.parcial:
            partes.append(f"{self.parcial} con datos pendientes")
        if self.fallo:
            partes.append(f"{self.fallo} con error (se reintentarán)")
        return "Sincronización incompleta: " + ", ".join(partes) + "."


@dataclass
class ResultadoPush:
    ok: bool
    razon: str | None = None
    resumen: ResumenPush = field(default_factory=ResumenPush)
    clientes: list[LogClientePush] = field(default_factory=list)
    base: str = ""
    inicio: str | None = None
    fin: str | None = None

    def mensaje_usuario(self) -> str:
        if self.razon == RAZON_SIN_CONEXION:
            return "Sin conexión. Se omite la sincronización de clientes."
        if self.razon == RAZON_ERROR_CONEXION:
            return "No se pudo verificar la conexión. Se omite la sincronización de clientes."
        return self.resumen.mensaje_usuario()

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ResultadoPull:
    datos: dict[str, list[Any]] = field(default_factory=dict)
    actualizados: list[str] = field(default_factory=list)
    locales: list[str] = field(default_factory=list)
    errores: list[str] = field(default_factory=list)
