from __future__ import annotations

from encuestas.domain.preguntas import (
    TipoPregunta,
    cantidad_proveedores_declarada,
    debe_omitirse_por_transporte,
    filtrar_preguntas_proveedores,
    preguntas_sin_responder,
    tipo_pregunta,
)

PREGUNTAS = [
    {"idPregunta": 1, "pregunta": "¿Cuántos proveedores tiene?", "tipoPregunta": "cantidad_proveedores"},
    {"idPregunta": 2, "pregunta": "Proveedor 1", "tipoPregunta": "proveedor", "numeroProveedor": 1},
    {"idPregunta": 3, "pregunta": "Proveedor 2", "tipoPregunta": "proveedor", "numeroProveedor": 2},
    {"idPregunta": 4, "pregunta": "Proveedor 3", "tipoPregunta": "proveedor", "numeroProveedor": 3},
    {"idPregunta": 5, "pregunta": "¿Cómo recibe la mercancía?", "tipoPregunta": "transporte"},
    {"idPregunta": 6, "pregunta": "¿Paga flete?", "tipoPregunta": "paga_flete"},
    {"idPregunta": 7, "pregunta": "Monto del flete", "tipoPregunta": "monto_flete"},
    {"idPregunta": 8, "pregunta": "Observaciones"},
]


def test_tipo_pregunta_por_defecto_y_desconocido() -> None:
    assert tipo_pregunta({"pregunta": "Proveedor 1"}) is TipoPregunta.GENERAL
    assert tipo_pregunta({"tipoPregunta": "inventado"}) is TipoPregunta.GENERAL
    assert tipo_pregunta(PREGUNTAS[4]) is TipoPregunta.TRANSPORTE


def test_filtrar_proveedores_usa_la_etiqueta_y_no_el_texto() -> None:
    preguntas = [*PREGUNTAS, {"idPregunta": 9, "pregunta": "Proveedor 9 (texto engañoso)"}]

    visibles = filtrar_preguntas_proveedores(preguntas, "2")

    ids = [p["idPregunta"] for p in visibles]
    assert 4 not in ids
    assert {2, 3, 9}.issubset(ids)


def test_flete_se_omite_si_el_cliente_busca_la_mercancia() -> None:
    respuestas = {5: "2"}

    assert debe_omitirse_por_transporte(PREGUNTAS[5], PREGUNTAS, respuestas) is True
    assert debe_omitirse_por_transporte(PREGUNTAS[6], PREGUNTAS, respuestas) is True
    assert debe_omitirse_por_transporte(PREGUNTAS[5], PREGUNTAS, {5: "1"}) is False
    assert debe_omitirse_por_transporte(PREGUNTAS[7], PREGUNTAS, respuestas) is False


def test_preguntas_sin_responder_aplica_ambas_reglas() -> None:
    respuestas = {1: "1", 2: "Distribuidora Norte", 5: "2"}

    faltantes = preguntas_sin_responder(PREGUNTAS, respuestas)

    assert [p["idPregunta"] for p in faltantes] == [8]
    assert cantidad_proveedores_declarada(PREGUNTAS, respuestas) == 1
    assert cantidad_proveedores_declarada(PREGUNTAS, {}) == 1
