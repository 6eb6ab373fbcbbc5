from __future__ import annotations

from encuestas.application.sync_clientes_payloads import (
    construir_llamadas_dependientes,
    llamada_condicion_pago,
    llamada_respuestas_lote,
    llamadas_formas_pago,
    llamadas_redes_sociales,
    pick_cliente_data,
)

CLIENTE = {
    "idCliente": "4",
    "fechaCreacion": "2025-03-01T12:30:00Z",
    "fechaSincronizacion": "",
    "sincronizacionParcial": {"idServidor": 1, "pendientes": []},
    "nombre": "Abasto Doña Rosa",
    "rif": "J-123",
    "facebook": "abastorosa",
    "instagram": "  ",
    "paginaWeb": "rosa.com",
}

RESPUESTAS = {
    "categorias": [{"idCategoria": 2, "cantidad": 5}, {"idCategoria": None}],
    "preguntas": [[{"idPregunta": 1, "respuesta": "si", "comentarios": None}], {"idPregunta": 2, "respuesta": "3"}],
    "forma-pago": [{"idFormaPago": 1, "respuesta": 1}, {"idFormaPago": 2, "respuesta": 0}],
    "condicion-pago": {"idCondicionPago": 3, "diaContado": "", "diaCredito": "15"},
}


def test_pick_cliente_data_quita_campos_locales() -> None:
    assert pick_cliente_data(CLIENTE) == {
        "nombre": "Abasto Doña Rosa",
        "rif": "J-123",
        "facebook": "abastorosa",
        "instagram": "  ",
        "paginaWeb": "rosa.com",
    }


def test_redes_sociales_solo_con_usuario() -> None:
    llamadas = llamadas_redes_sociales(CLIENTE, 900)

    assert [llamada.clave for llamada in llamadas] == ["redes-sociales:facebook", "redes-sociales:paginaWeb"]
    assert llamadas[1].body == {"usuario": "rosa.com", "cliente": {"idCliente": 900}, "redSocial": {"idRedSocial": 4}}


def test_respuestas_lote_aplana_y_completa_comentarios() -> None:
    [llamada] = llamada_respuestas_lote(RESPUESTAS, 900)

    assert llamada.endpoint == "respuestas/lote"
    assert llamada.body == [
        {
            "cliente": {"idCliente": 900},
            "pregunta": {"idPregunta": 1},
            "instrumento": {"idInstrumento": 1},
            "respuesta": "si",
            "comentarios": "",
        },
        {
            "cliente": {"idCliente": 900},
            "pregunta": {"idPregunta": 2},
            "instrumento": {"idInstrumento": 1},
            "respuesta": "3",
            "comentarios": "",
        },
    ]
    assert llamada_respuestas_lote({"preguntas": []}, 900) == []


def test_formas_pago_solo_las_marcadas_si() -> None:
    [llamada] = llamadas_formas_pago(RESPUESTAS, 900)

    assert llamada.body == {"id": 900, "cliente": {"idCliente": 900}, "formaPago": {"idFormaPago": 1}}


def test_condicion_pago_convierte_dias_a_numero() -> None:
    [llamada] = llamada_condicion_pago(RESPUESTAS, 900)

    assert llamada.body["diaContado"] == 0
    assert llamada.body["diaCredito"] == 15
    assert llamada_condicion_pago({"condicion-pago": {}}, 900) == []


def test_orden_fijo_de_dependientes() -> None:
    llamadas = construir_llamadas_dependientes(CLIENTE, RESPUESTAS, 900)

    assert [llamada.endpoint for llamada in llamadas] == [
        "clientes-redes-sociales",
        "clientes-redes-sociales",
        "clientes-categorias",
        "respuestas/lote",
        "clientes-formas-pago",
        "clientes-condicion-pago",
    ]


def test_bundle_vacio_no_genera_dependientes() -> None:
    assert construir_llamadas_dependientes({"nombre": "Solo"}, {}, 1) == []
