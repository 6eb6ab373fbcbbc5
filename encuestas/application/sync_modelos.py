from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any

from encuestas.core.metrics import metrics_registry
from encuestas.core.observability import OperationContext, log_event
from encuestas.domain.models import (
    MODELO_CLIENTES,
    MetadatosModelo,
    meta_filename,
    modelo_filename,
    normalizar_coleccion,
)
from encuestas.domain.ports import AlmacenamientoJsonPort, ConectividadPort, FuenteModelosPort
from encuestas.domain.sync_models import ResultadoPull

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, "int | None", "int | None"], None]

MENSAJE_FIN_CARGA = "Iniciando..."


class ModelSyncService:
    """Pull de colecciones de referencia con control de obsolescencia.

    Un fallo en una colección nunca aborta el resto: esa colección cae a lo
    persistido localmente (o a lista vacía).
    """

    def __init__(
        self,
        storage: AlmacenamientoJsonPort,
        fuente: FuenteModelosPort | None,
        conectividad: ConectividadPort,
        modelos: Iterable[str],
    ) -> None:
        self._storage = storage
        self._fuente = fuente
        self._conectividad = conectividad
        self._modelos = [modelo for modelo in modelos if modelo != MODELO_CLIENTES]

    @property
    def modelos(self) -> list[str]:
        return list(self._modelos)

    def leer_modelo(self, modelo: str) -> list[Any]:
        return normalizar_coleccion(self._storage.read_json(modelo_filename(modelo), []))

    def necesita_actualizar(self, modelo: str, remote_meta: MetadatosModelo | None) -> bool:
        if not self._storage.exists(modelo_filename(modelo)) or not self._storage.exists(meta_filename(modelo)):
            return True
        if remote_meta is None:
            return False
        local_meta = MetadatosModelo.from_payload(self._storage.read_json(meta_filename(modelo), {}))
        if local_meta is None:
            return True
        return local_meta.difiere_de(remote_meta)

    def _puede_descargar(self) -> bool:
        if self._fuente is None or not self._storage.es_duradero:
            return False
        try:
            return self._conectividad.is_connected()
        except Exception:  # noqa: BLE001
            logger.warning("No se pudo verificar la conexión; se usan datos locales", exc_info=True)
            return False

    def sync(self, on_progress: ProgressCallback | None = None) -> ResultadoPull:
        resultado = ResultadoPull()
        total = len(self._modelos)
        with OperationContext("pull_modelos"):
            online = self._puede_descargar()
            log_event(logger, "pull_iniciado", {"modelos": total, "online": online})

            for indice, modelo in enumerate(self._modelos, start=1):
                try:
                    mensaje = self._sync_modelo(modelo, online, resultado)
                except Exception as exc:  # noqa: BLE001
                    logger.warning("Error procesando %s: %s", modelo, exc)
                    resultado.errores.append(modelo)
                    resultado.datos[modelo] = self.leer_modelo(modelo)
                    mensaje = f"{modelo} cargado localmente"
                if on_progress:
                    on_progress(mensaje, indice, total)

            log_event(
                logger,
                "pull_finalizado",
                {
                    "actualizados": resultado.actualizados,
                    "locales": resultado.locales,
                    "errores": resultado.errores,
                },
            )
        if on_progress:
            on_progress(MENSAJE_FIN_CARGA, None, None)
        return resultado

    def _sync_modelo(self, modelo: str, online: bool, resultado: ResultadoPull) -> str:
        if not online or self._fuente is None:
            resultado.datos[modelo] = self.leer_modelo(modelo)
            resultado.locales.append(modelo)
            return f"{modelo} cargado localmente"

        remote_meta = self._fuente.fetch_metadata(modelo)
        if not self.necesita_actualizar(modelo, remote_meta):
            logger.info("%s ya está actualizado", modelo)
            resultado.datos[modelo] = self.leer_modelo(modelo)
            resultado.locales.append(modelo)
            return f"{modelo} ya actualizado"

        payload = self._fuente.fetch_coleccion(modelo)
        datos = normalizar_coleccion(payload)
        self._storage.write_json(modelo_filename(modelo), payload)
        if remote_meta is not None:
            self._storage.write_json(meta_filename(modelo), remote_meta.to_payload())
        resultado.datos[modelo] = datos
        resultado.actualizados.append(modelo)
        metrics_registry.incrementar("modelos_descargados")
        logger.info("%s sincronizado (%s registros)", modelo, len(datos))
        return f"Actualizando datos de {modelo}..."
