from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any

CAMPO_TIPO_PREGUNTA = "tipoPregunta"
CAMPO_NUMERO_PROVEEDOR = "numeroProveedor"

# Valor de la pregunta de transporte que indica que el cliente busca la mercancía.
TRANSPORTE_LOS_BUSCO = "2"


class TipoPregunta(str, Enum):
    """Etiqueta estable asignada a cada pregunta en los datos maestros.

    Las reglas de visibilidad del formulario dependen únicamente de esta
    etiqueta; el texto visible de la pregunta puede cambiar sin romperlas.
    """

    GENERAL = "general"
    CANTIDAD_PROVEEDORES = "cantidad_proveedores"
    PROVEEDOR = "proveedor"
    TRANSPORTE = "transporte"
    PAGA_FLETE = "paga_flete"
    MONTO_FLETE = "monto_flete"


def tipo_pregunta(pregunta: Mapping[str, Any]) -> TipoPregunta:
    try:
        return TipoPregunta(str(pregunta.get(CAMPO_TIPO_PREGUNTA) or TipoPregunta.GENERAL.value))
    except ValueError:
        return TipoPregunta.GENERAL


def numero_proveedor(pregunta: Mapping[str, Any]) -> int:
    try:
        return int(pregunta.get(CAMPO_NUMERO_PROVEEDOR) or 0)
    except (TypeError, ValueError):
        return 0


def _a_entero(valor: Any, default: int = 0) -> int:
    try:
        return int(str(valor).strip())
    except (TypeError, ValueError):
        return default


def filtrar_preguntas_proveedores(preguntas: Iterable[Mapping[str, Any]], cantidad: Any) -> list[Mapping[str, Any]]:
    """Oculta las preguntas de proveedores por encima de la cantidad declarada."""
    limite = _a_entero(cantidad)
    visibles = []
    for pregunta in preguntas:
        if tipo_pregunta(pregunta) is TipoPregunta.PROVEEDOR and numero_proveedor(pregunta) > limite:
            continue
        visibles.append(pregunta)
    return visibles


def debe_omitirse_por_transporte(
    pregunta: Mapping[str, Any],
    preguntas: Iterable[Mapping[str, Any]],
    respuestas: Mapping[Any, Any],
) -> bool:
    if tipo_pregunta(pregunta) not in (TipoPregunta.PAGA_FLETE, TipoPregunta.MONTO_FLETE):
        return False
    transporte = next((p for p in preguntas if tipo_pregunta(p) is TipoPregunta.TRANSPORTE), None)
    if transporte is None:
        return False
    valor = respuestas.get(transporte.get("idPregunta"))
    return str(valor if valor is not None else "") == TRANSPORTE_LOS_BUSCO


def cantidad_proveedores_declarada(
    preguntas: Iterable[Mapping[str, Any]],
    respuestas: Mapping[Any, Any],
    default: int = 1,
) -> int:
    for pregunta in preguntas:
        if tipo_pregunta(pregunta) is TipoPregunta.CANTIDAD_PROVEEDORES:
            return _a_entero(respuestas.get(pregunta.get("idPregunta")), default)
    return default


def preguntas_sin_responder(
    preguntas: Iterable[Mapping[str, Any]],
    respuestas: Mapping[Any, Any],
) -> list[Mapping[str, Any]]:
    todas = list(preguntas)
    activas = filtrar_preguntas_proveedores(todas, cantidad_proveedores_declarada(todas, respuestas))
    faltantes = []
    for pregunta in activas:
        if debe_omitirse_por_transporte(pregunta, todas, respuestas):
            continue
        valor = respuestas.get(pregunta.get("idPregunta"))
        if valor is None or str(valor).strip() == "":
            faltantes.append(pregunta)
    return faltantes
