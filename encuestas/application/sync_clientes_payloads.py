from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from encuestas.domain.models import CAMPOS_SOLO_LOCALES, REDES_SOCIALES_ID

ENDPOINT_CLIENTES = "clientes"
ENDPOINT_REDES_SOCIALES = "clientes-redes-sociales"
ENDPOINT_CATEGORIAS = "clientes-categorias"
ENDPOINT_RESPUESTAS_LOTE = "respuestas/lote"
ENDPOINT_FORMAS_PAGO = "clientes-formas-pago"
ENDPOINT_CONDICION_PAGO = "clientes-condicion-pago"

ID_INSTRUMENTO = 1
RESPUESTA_SI = 1


@dataclass(frozen=True)
class LlamadaDependiente:
    """Escritura remota que cuelga del cliente ya creado en el servidor.

    ``clave`` identifica la llamada de forma estable entre ejecuciones para
    poder reenviar solo las que quedaron pendientes.
    """

    clave: str
    paso: str
    endpoint: str
    body: Any


def pick_cliente_data(cliente: Mapping[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in (cliente or {}).items() if key not in CAMPOS_SOLO_LOCALES}


def _aplanar(valores: Iterable[Any]) -> list[Any]:
    planos: list[Any] = []
    for valor in valores:
        if isinstance(valor, list):
            planos.extend(valor)
        else:
            planos.append(valor)
    return planos


def _lista(valor: Any) -> list[Any]:
    return valor if isinstance(valor, list) else []


def _numero(valor: Any) -> float | int:
    try:
        numero = float(valor or 0)
    except (TypeError, ValueError):
        return 0
    return int(numero) if numero.is_integer() else numero


def llamadas_redes_sociales(cliente: Mapping[str, Any], id_servidor: Any) -> list[LlamadaDependiente]:
    llamadas = []
    for red, id_red in REDES_SOCIALES_ID.items():
        usuario = str(cliente.get(red) or "").strip()
        if not usuario:
            continue
        llamadas.append(
            LlamadaDependiente(
                clave=f"redes-sociales:{red}",
                paso=f"POST /{ENDPOINT_REDES_SOCIALES} ({red})",
                endpoint=ENDPOINT_REDES_SOCIALES,
                body={
                    "usuario": usuario,
                    "cliente": {"idCliente": id_servidor},
                    "redSocial": {"idRedSocial": id_red},
                },
            )
        )
    return llamadas


def llamadas_categorias(respuestas: Mapping[str, Any], id_servidor: Any) -> list[LlamadaDependiente]:
    llamadas = []
    for categoria in _lista(respuestas.get("categorias")):
        if not isinstance(categoria, Mapping) or not categoria.get("idCategoria"):
            continue
        llamadas.append(
            LlamadaDependiente(
                clave=f"categorias:{categoria['idCategoria']}",
                paso=f"POST /{ENDPOINT_CATEGORIAS}",
                endpoint=ENDPOINT_CATEGORIAS,
                body={
                    "cliente": {"idCliente": id_servidor},
                    "categoria": {"idCategoria": categoria["idCategoria"]},
                    "cantidad": categoria.get("cantidad"),
                },
            )
        )
    return llamadas


def llamada_respuestas_lote(
    respuestas: Mapping[str, Any],
    id_servidor: Any,
    endpoint: str = ENDPOINT_RESPUESTAS_LOTE,
) -> list[LlamadaDependiente]:
    preguntas = [p for p in _aplanar(_lista(respuestas.get("preguntas"))) if isinstance(p, Mapping)]
    if not preguntas:
        return []
    lote = [
        {
            "cliente": {"idCliente": id_servidor},
            "pregunta": {"idPregunta": pregunta.get("idPregunta")},
            "instrumento": {"idInstrumento": ID_INSTRUMENTO},
            "respuesta": pregunta.get("respuesta"),
            "comentarios": str(pregunta.get("comentarios") if pregunta.get("comentarios") is not None else ""),
        }
        for pregunta in preguntas
    ]
    return [LlamadaDependiente(clave="respuestas:lote", paso=f"POST /{endpoint}", endpoint=endpoint, body=lote)]


def llamadas_formas_pago(respuestas: Mapping[str, Any], id_servidor: Any) -> list[LlamadaDependiente]:
    llamadas = []
    for forma in _lista(respuestas.get("forma-pago")):
        if not isinstance(forma, Mapping):
            continue
        if forma.get("respuesta") != RESPUESTA_SI or not forma.get("idFormaPago"):
            continue
        llamadas.append(
            LlamadaDependiente(
                clave=f"formas-pago:{forma['idFormaPago']}",
                paso=f"POST /{ENDPOINT_FORMAS_PAGO}",
                endpoint=ENDPOINT_FORMAS_PAGO,
                body={
                    "id": id_servidor,
                    "cliente": {"idCliente": id_servidor},
                    "formaPago": {"idFormaPago": forma["idFormaPago"]},
                },
            )
        )
    return llamadas


def llamada_condicion_pago(respuestas: Mapping[str, Any], id_servidor: Any) -> list[LlamadaDependiente]:
    condicion = respuestas.get("condicion-pago")
    if not isinstance(condicion, Mapping) or not condicion.get("idCondicionPago"):
        return []
    return [
        LlamadaDependiente(
            clave="condicion-pago",
            paso=f"POST /{ENDPOINT_CONDICION_PAGO}",
            endpoint=ENDPOINT_CONDICION_PAGO,
            body={
                "cliente": {"idCliente": id_servidor},
                "condicionPago": {"idCondicionPago": condicion["idCondicionPago"]},
                "diaContado": _numero(condicion.get("diaContado")),
                "diaCredito": _numero(condicion.get("diaCredito")),
            },
        )
    ]


def construir_llamadas_dependientes(
    cliente: Mapping[str, Any],
    respuestas: Mapping[str, Any],
    id_servidor: Any,
    *,
    endpoint_respuestas: str = ENDPOINT_RESPUESTAS_LOTE,
) -> list[LlamadaDependiente]:
    """Orden fijo: redes, categorías, respuestas, formas de pago, condición de pago."""
    return [
        *llamadas_redes_sociales(cliente, id_servidor),
        *llamadas_categorias(respuestas, id_servidor),
        *llamada_respuestas_lote(respuestas, id_servidor, endpoint_respuestas),
        *llamadas_formas_pago(respuestas, id_servidor),
        *llamada_condicion_pago(respuestas, id_servidor),
    ]
