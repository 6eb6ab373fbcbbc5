from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from typing import Any

from encuestas.domain.models import (
    CAMPO_FECHA_CREACION,
    CAMPO_FECHA_SINCRONIZACION,
    CAMPO_ID_CLIENTE,
    CAMPO_SINCRONIZACION_PARCIAL,
    CLIENTES_FILE,
    RESPUESTAS_FILE,
)
from encuestas.domain.ports import AlmacenamientoJsonPort

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_timestamp(moment: datetime) -> str:
    return moment.isoformat().replace("+00:00", "Z")


def _id_numerico(cliente: Mapping[str, Any]) -> int:
    try:
        return int(str(cliente.get(CAMPO_ID_CLIENTE, "")).strip())
    except (TypeError, ValueError):
        return 0


def es_pendiente(cliente: Mapping[str, Any]) -> bool:
    return (cliente.get(CAMPO_FECHA_SINCRONIZACION) or "") == ""


class LocalClientesStore:
    """CRUD de ``clientes.json`` y del mapa paralelo ``respuestas.json``.

    Cada mutación lee y reescribe la colección completa. Asume un único
    escritor: dos altas concurrentes podrían calcular el mismo identificador.
    """

    def __init__(self, storage: AlmacenamientoJsonPort, *, clock: Clock = utc_now) -> None:
        self._storage = storage
        self._clock = clock

    def read_all_client_records(self) -> list[dict[str, Any]]:
        clientes = self._storage.read_json(CLIENTES_FILE, [])
        if not isinstance(clientes, list):
            logger.warning("%s no contiene una lista; se trata como vacío", CLIENTES_FILE)
            return []
        return [cliente for cliente in clientes if isinstance(cliente, dict)]

    def write_all_client_records(self, clientes: list[dict[str, Any]] | None) -> None:
        self._storage.write_json(CLIENTES_FILE, list(clientes or []))

    def create_client_record(self, fields: Mapping[str, Any]) -> str:
        existentes = self.read_all_client_records()
        nuevo_id = str(max((_id_numerico(cliente) for cliente in existentes), default=0) + 1)
        datos = {
            key: value
            for key, value in fields.items()
            if key not in (CAMPO_ID_CLIENTE, CAMPO_FECHA_CREACION, CAMPO_FECHA_SINCRONIZACION, CAMPO_SINCRONIZACION_PARCIAL)
        }
        nuevo = {
            CAMPO_ID_CLIENTE: nuevo_id,
            CAMPO_FECHA_CREACION: iso_timestamp(self._clock()),
            CAMPO_FECHA_SINCRONIZACION: "",
            **datos,
        }
        self.write_all_client_records([*existentes, nuevo])
        logger.info("Cliente guardado con ID: %s", nuevo_id)
        return nuevo_id

    def get_client_record(self, id_cliente: str) -> dict[str, Any] | None:
        return next(
            (cliente for cliente in self.read_all_client_records() if str(cliente.get(CAMPO_ID_CLIENTE)) == str(id_cliente)),
            None,
        )

    def update_client_record(self, id_cliente: str, fields: Mapping[str, Any]) -> bool:
        """Actualiza campos de perfil; identidad y marca de sincronización no se tocan."""
        clientes = self.read_all_client_records()
        for index, cliente in enumerate(clientes):
            if str(cliente.get(CAMPO_ID_CLIENTE)) != str(id_cliente):
                continue
            cambios = {
                key: value
                for key, value in fields.items()
                if key not in (CAMPO_ID_CLIENTE, CAMPO_FECHA_CREACION, CAMPO_FECHA_SINCRONIZACION)
            }
            clientes[index] = {**cliente, **cambios}
            self.write_all_client_records(clientes)
            return True
        return False

    def delete_client_record(self, id_cliente: str) -> bool:
        self.delete_answer_bundle(id_cliente)
        clientes = self.read_all_client_records()
        restantes = [cliente for cliente in clientes if str(cliente.get(CAMPO_ID_CLIENTE)) != str(id_cliente)]
        if len(restantes) == len(clientes):
            return False
        self.write_all_client_records(restantes)
        logger.info("Cliente %s y sus respuestas eliminados", id_cliente)
        return True

    def pending_client_records(self) -> list[dict[str, Any]]:
        return [cliente for cliente in self.read_all_client_records() if es_pendiente(cliente)]

    def mark_synced(self, id_cliente: str, when: str) -> bool:
        clientes = self.read_all_client_records()
        for index, cliente in enumerate(clientes):
            if str(cliente.get(CAMPO_ID_CLIENTE)) != str(id_cliente):
                continue
            if not es_pendiente(cliente):
                return False
            actualizado = {**cliente, CAMPO_FECHA_SINCRONIZACION: when}
            actualizado.pop(CAMPO_SINCRONIZACION_PARCIAL, None)
            clientes[index] = actualizado
            self.write_all_client_records(clientes)
            return True
        return False

    def mark_partial(self, id_cliente: str, id_servidor: Any, pendientes: list[str]) -> bool:
        clientes = self.read_all_client_records()
        for index, cliente in enumerate(clientes):
            if str(cliente.get(CAMPO_ID_CLIENTE)) != str(id_cliente):
                continue
            clientes[index] = {
                **cliente,
                CAMPO_SINCRONIZACION_PARCIAL: {"idServidor": id_servidor, "pendientes": list(pendientes)},
            }
            self.write_all_client_records(clientes)
            return True
        return False

    def read_answers(self) -> dict[str, Any]:
        respuestas = self._storage.read_json(RESPUESTAS_FILE, {})
        if not isinstance(respuestas, dict):
            logger.warning("%s tiene formato inesperado (%s), se reinicia como objeto", RESPUESTAS_FILE, type(respuestas).__name__)
            return {}
        return respuestas

    def read_answer_bundle(self, id_cliente: str) -> dict[str, Any]:
        bundle = self.read_answers().get(str(id_cliente))
        return bundle if isinstance(bundle, dict) else {}

    def save_answer_bundle(self, id_cliente: str, bundle: Mapping[str, Any]) -> None:
        respuestas = self.read_answers()
        respuestas[str(id_cliente)] = dict(bundle)
        self._storage.write_json(RESPUESTAS_FILE, respuestas)
        logger.info("Respuestas guardadas para cliente %s", id_cliente)

    def delete_answer_bundle(self, id_cliente: str) -> None:
        respuestas = self.read_answers()
        if str(id_cliente) not in respuestas:
            return
        del respuestas[str(id_cliente)]
        self._storage.write_json(RESPUESTAS_FILE, respuestas)
