from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from encuestas.application.cache_maestros import MasterDataCache
from encuestas.application.clientes_store import LocalClientesStore
from encuestas.application.sync_clientes import PushSyncQueue
from encuestas.application.sync_modelos import ModelSyncService, ProgressCallback
from encuestas.core.errors import ValidationError
from encuestas.core.metrics import medir_tiempo
from encuestas.domain.models import DatosMaestros
from encuestas.domain.ports import ClientesObserverPort
from encuestas.domain.sync_models import ResultadoPush

logger = logging.getLogger(__name__)


class SyncUseCase:
    """Fachada de aplicación del motor de sincronización.

    Mantiene a la UI desacoplada de almacenamiento y red: arranque (pull y
    carga de caché), alta y baja de clientes y push de pendientes.
    """

    def __init__(
        self,
        model_sync: ModelSyncService,
        cache: MasterDataCache,
        store: LocalClientesStore,
        push_queue: PushSyncQueue,
        observer: ClientesObserverPort | None = None,
    ) -> None:
        self._model_sync = model_sync
        self._cache = cache
        self._store = store
        self._push_queue = push_queue
        self._observer = observer

    @property
    def cache(self) -> MasterDataCache:
        return self._cache

    @property
    def store(self) -> LocalClientesStore:
        return self._store

    @medir_tiempo("latency.arranque_ms")
    def arrancar(self, on_progress: ProgressCallback | None = None) -> DatosMaestros:
        resultado = self._model_sync.sync(on_progress)
        return self._cache.load(resultado.datos)

    @medir_tiempo("latency.push_ms")
    def push(self) -> ResultadoPush:
        return self._push_queue.run()

    def crear_cliente(self, fields: Mapping[str, Any], respuestas: Mapping[str, Any] | None = None) -> str:
        if not str(fields.get("nombre") or "").strip():
            raise ValidationError("El nombre del cliente es obligatorio")
        id_cliente = self._store.create_client_record(fields)
        if respuestas is not None:
            self._store.save_answer_bundle(id_cliente, respuestas)
        self._notify()
        return id_cliente

    def eliminar_cliente(self, id_cliente: str) -> bool:
        eliminado = self._store.delete_client_record(id_cliente)
        if eliminado:
            self._notify()
        return eliminado

    def clientes(self) -> list[dict[str, Any]]:
        return self._store.read_all_client_records()

    def guardar_y_sincronizar(self, fields: Mapping[str, Any], respuestas: Mapping[str, Any] | None = None) -> ResultadoPush:
        id_cliente = self.crear_cliente(fields, respuestas)
        resultado = self.push()
        if not resultado.ok:
            logger.info("Cliente %s guardado localmente; sincronización omitida: %s", id_cliente, resultado.razon)
        return resultado

    def _notify(self) -> None:
        if self._observer is not None:
            self._observer.notify_changed()
