from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from encuestas.application.clientes_store import Clock, LocalClientesStore, iso_timestamp, utc_now
from encuestas.application.sync_clientes_payloads import (
    ENDPOINT_CLIENTES,
    ENDPOINT_RESPUESTAS_LOTE,
    LlamadaDependiente,
    construir_llamadas_dependientes,
    pick_cliente_data,
)
from encuestas.core.metrics import metrics_registry
from encuestas.core.observability import OperationContext, log_event
from encuestas.core.operational_logging import log_operational_error
from encuestas.domain.models import CAMPO_ID_CLIENTE, CAMPO_SINCRONIZACION_PARCIAL
from encuestas.domain.ports import ApiClientPort, ClientesObserverPort, ConectividadPort
from encuestas.domain.sync_models import (
    ESTADO_FALLO,
    ESTADO_OK,
    ESTADO_PARCIAL,
    RAZON_ERROR_CONEXION,
    RAZON_SIN_CONEXION,
    EstadoCliente,
    LogClientePush,
    PasoRemoto,
    PoliticaDependientes,
    ResultadoPush,
    ResumenPush,
)

logger = logging.getLogger(__name__)

ROOT_RETRIES = 2
DEPENDENT_RETRIES = 1


class _SinObservadores:
    def notify_changed(self) -> None:
        return None


class PushSyncQueue:
    """Sube a la API los clientes creados localmente que siguen pendientes.

    Los clientes se procesan de uno en uno y, dentro de cada cliente, las
    escrituras dependientes van en orden fijo tras crear el cliente raíz. Solo
    el éxito del ``POST /clientes`` decide si el cliente puede marcarse como
    sincronizado; qué ocurre cuando falla una escritura dependiente lo decide
    ``PoliticaDependientes``:

    * ``RAIZ_SUFICIENTE``: el cliente se marca sincronizado y queda ``ok``;
      los pasos fallidos solo constan en el log de la ejecución.
    * ``ESTRICTA``: el cliente queda ``parcial``, sin fecha de sincronización,
      y guarda el id del servidor y las llamadas pendientes para reenviar solo
      esas en la siguiente ejecución.

    Un cliente ``parcial`` nunca vuelve a crear la raíz, aunque la política
    haya cambiado entre ejecuciones.
    """

    def __init__(
        self,
        store: LocalClientesStore,
        api_client: ApiClientPort,
        conectividad: ConectividadPort,
        observer: ClientesObserverPort | None = None,
        *,
        politica: PoliticaDependientes = PoliticaDependientes.RAIZ_SUFICIENTE,
        clock: Clock = utc_now,
        endpoint_respuestas: str = ENDPOINT_RESPUESTAS_LOTE,
    ) -> None:
        self._store = store
        self._api_client = api_client
        self._conectividad = conectividad
        self._observer = observer or _SinObservadores()
        self._politica = politica
        self._clock = clock
        self._endpoint_respuestas = endpoint_respuestas

    @property
    def politica(self) -> PoliticaDependientes:
        return self._politica

    def run(self) -> ResultadoPush:
        inicio = iso_timestamp(self._clock())
        with OperationContext("push_clientes"):
            razon = self._verificar_conexion()
            if razon is not None:
                log_event(logger, "push_omitido", {"razon": razon})
                return ResultadoPush(ok=False, razon=razon, base=self._api_client.base_url, inicio=inicio)

            pendientes = self._store.pending_client_records()
            respuestas = self._store.read_answers()
            log_event(logger, "push_iniciado", {"pendientes": len(pendientes), "base": self._api_client.base_url})

            logs: list[LogClientePush] = []
            for cliente in pendientes:
                id_local = str(cliente.get(CAMPO_ID_CLIENTE))
                log = LogClientePush(id_local=id_local)
                bundle = respuestas.get(id_local)
                try:
                    self._procesar_cliente(cliente, bundle if isinstance(bundle, Mapping) else {}, log)
                except Exception as exc:  # noqa: BLE001
                    log.pasos.append(PasoRemoto(paso="exception", url="", ok=False, error=str(exc)))
                    log.estado = ESTADO_FALLO
                    log.estado_maquina = EstadoCliente.FALLIDO
                    log_operational_error(
                        "Error inesperado sincronizando cliente",
                        exc=exc,
                        extra={"id_local": id_local},
                    )
                logs.append(log)

            resumen = ResumenPush.desde_logs(logs)
            metrics_registry.incrementar("push_ejecutados")
            metrics_registry.incrementar("clientes_sincronizados", resumen.ok)
            metrics_registry.incrementar("clientes_fallidos", resumen.fallo)
            log_event(
                logger,
                "push_resumen",
                {"total": resumen.total, "ok": resumen.ok, "parcial": resumen.parcial, "fallo": resumen.fallo},
            )
            return ResultadoPush(
                ok=True,
                resumen=resumen,
                clientes=logs,
                base=self._api_client.base_url,
                inicio=inicio,
                fin=iso_timestamp(self._clock()),
            )

    def _verificar_conexion(self) -> str | None:
        try:
            connected = self._conectividad.is_connected()
        except Exception as exc:  # noqa: BLE001
            logger.warning("Error verificando conexión: %s", exc)
            return RAZON_ERROR_CONEXION
        if not connected:
            logger.info("Sin conexión. Se omite sincronización de clientes -> API")
            return RAZON_SIN_CONEXION
        return None

    def _procesar_cliente(self, cliente: Mapping[str, Any], respuestas: Mapping[str, Any], log: LogClientePush) -> None:
        reanudacion = self._reanudacion(cliente)
        if reanudacion is not None:
            id_servidor, claves_pendientes = reanudacion
            logger.info("Cliente %s: reenviando %s llamada(s) pendientes", log.id_local, len(claves_pendientes))
        else:
            log.estado_maquina = EstadoCliente.CREANDO_RAIZ
            id_servidor = self._crear_raiz(cliente, log)
            if id_servidor is None:
                log.estado = ESTADO_FALLO
                log.estado_maquina = EstadoCliente.FALLIDO
                return
            claves_pendientes = None
        log.id_servidor = id_servidor

        log.estado_maquina = EstadoCliente.ADJUNTANDO
        llamadas = construir_llamadas_dependientes(
            cliente,
            respuestas,
            id_servidor,
            endpoint_respuestas=self._endpoint_respuestas,
        )
        if claves_pendientes is not None:
            llamadas = [llamada for llamada in llamadas if llamada.clave in claves_pendientes]
        fallidas = [llamada.clave for llamada in llamadas if not self._enviar_dependiente(llamada, log)]

        if fallidas and self._politica is PoliticaDependientes.ESTRICTA:
            self._store.mark_partial(log.id_local, id_servidor, fallidas)
            log.estado = ESTADO_PARCIAL
            return

        if fallidas:
            logger.warning(
                "Cliente %s sincronizado con %s escritura(s) dependiente(s) fallida(s): %s",
                log.id_local,
                len(fallidas),
                fallidas,
            )
        ahora = iso_timestamp(self._clock())
        if self._store.mark_synced(log.id_local, ahora):
            self._observer.notify_changed()
        log.estado = ESTADO_OK
        log.estado_maquina = EstadoCliente.SINCRONIZADO
        log.fecha_sincronizacion = ahora

    def _reanudacion(self, cliente: Mapping[str, Any]) -> tuple[Any, set[str]] | None:
        # Un cliente parcial ya existe en el servidor sea cual sea la política actual.
        parcial = cliente.get(CAMPO_SINCRONIZACION_PARCIAL)
        if not isinstance(parcial, Mapping) or not parcial.get("idServidor"):
            return None
        pendientes = parcial.get("pendientes")
        return parcial["idServidor"], {str(clave) for clave in pendientes} if isinstance(pendientes, list) else set()

    def _crear_raiz(self, cliente: Mapping[str, Any], log: LogClientePush) -> Any:
        body = pick_cliente_data(cliente)
        paso = PasoRemoto(
            paso=f"POST /{ENDPOINT_CLIENTES}",
            url=self._api_client.url_for(ENDPOINT_CLIENTES),
            body=body,
            clave=ENDPOINT_CLIENTES,
        )
        log.pasos.append(paso)
        respuesta = self._api_client.post_json(ENDPOINT_CLIENTES, body, retries=ROOT_RETRIES)
        paso.intentos = respuesta.intentos
        paso.status = respuesta.status
        id_servidor = respuesta.data.get("idCliente") if respuesta.ok and isinstance(respuesta.data, Mapping) else None
        paso.ok = bool(id_servidor)
        if not id_servidor:
            paso.error = respuesta.error or "Respuesta sin idCliente"
            log_operational_error(
                "No se pudo crear el cliente en la API",
                extra={"id_local": log.id_local, "status": respuesta.status, "error": paso.error},
            )
            return None
        return id_servidor

    def _enviar_dependiente(self, llamada: LlamadaDependiente, log: LogClientePush) -> bool:
        paso = PasoRemoto(
            paso=llamada.paso,
            url=self._api_client.url_for(llamada.endpoint),
            body=llamada.body,
            clave=llamada.clave,
        )
        log.pasos.append(paso)
        respuesta = self._api_client.post_json(llamada.endpoint, llamada.body, retries=DEPENDENT_RETRIES)
        paso.ok = respuesta.ok
        paso.intentos = respuesta.intentos
        paso.status = respuesta.status
        paso.error = respuesta.error
        if not respuesta.ok:
            logger.warning("Cliente %s: %s falló (%s)", log.id_local, llamada.paso, respuesta.error)
        return respuesta.ok
