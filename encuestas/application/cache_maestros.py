from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from encuestas.core.errors import MasterDataLoadError
from encuestas.domain.models import SLOTS_MAESTROS, DatosMaestros, normalizar_coleccion

logger = logging.getLogger(__name__)

ReadyCallback = Callable[[DatosMaestros], None]


class MasterDataCache:
    """Caché de datos maestros de la sesión.

    Se construye explícitamente y se inyecta en los consumidores. Se llena una
    sola vez con el resultado del pull y queda de solo lectura hasta ``clear``.
    Los suscriptores de ``on_ready`` se disparan una única vez tras una carga
    exitosa; si la carga falla permanecen en cola.
    """

    def __init__(self) -> None:
        self._datos = DatosMaestros()
        self._listeners: list[ReadyCallback] = []

    def load(self, reference_data: Mapping[str, Any]) -> DatosMaestros:
        return self._load_with(lambda modelo: reference_data.get(modelo))

    def load_from_storage(self, leer_modelo: Callable[[str], Any]) -> DatosMaestros:
        return self._load_with(leer_modelo)

    def _load_with(self, obtener: Callable[[str], Any]) -> DatosMaestros:
        if self._datos.loading or self._datos.loaded:
            return self._datos

        self._datos.loading = True
        try:
            colecciones = {
                atributo: list(normalizar_coleccion(obtener(modelo)))
                for modelo, atributo in SLOTS_MAESTROS.items()
            }
        except Exception as exc:
            self._datos.loading = False
            logger.exception("Error cargando datos maestros")
            raise MasterDataLoadError(f"No se pudieron cargar los datos maestros: {exc}") from exc

        for atributo, valores in colecciones.items():
            setattr(self._datos, atributo, valores)
        self._datos.loaded = True
        self._datos.loading = False
        logger.info("Cache de datos maestros cargado: %s", self._datos.conteos())
        self._notify_listeners()
        return self._datos

    def _notify_listeners(self) -> None:
        listeners, self._listeners = self._listeners, []
        for callback in listeners:
            try:
                callback(self._datos)
            except Exception:  # noqa: BLE001
                logger.warning("Error en listener de cache", exc_info=True)

    def get(self) -> DatosMaestros:
        if not self._datos.loaded:
            logger.warning("Intentando obtener datos del cache antes de cargarlos")
        return self._datos

    def on_ready(self, callback: ReadyCallback) -> Callable[[], None]:
        if self._datos.loaded:
            callback(self._datos)
            return lambda: None

        # Como un conjunto: registrar dos veces el mismo callable no lo duplica.
        if callback not in self._listeners:
            self._listeners.append(callback)

        def _unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return _unsubscribe

    def is_loaded(self) -> bool:
        return self._datos.loaded

    def pending_listeners(self) -> int:
        return len(self._listeners)

    def clear(self) -> None:
        self._datos = DatosMaestros()
        self._listeners = []
