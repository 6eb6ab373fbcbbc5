from __future__ import annotations

from dataclasses import dataclass

from encuestas.application.autenticacion import AutenticacionLocal
from encuestas.application.cache_maestros import MasterDataCache
from encuestas.application.clientes_store import LocalClientesStore
from encuestas.application.notificador import ClientesObservers, EventNotifier
from encuestas.application.sync_clientes import PushSyncQueue
from encuestas.application.sync_modelos import ModelSyncService
from encuestas.application.sync_use_case import SyncUseCase
from encuestas.bootstrap.settings import SyncSettings, load_settings
from encuestas.domain.ports import AlmacenamientoJsonPort, ConectividadPort, FuenteModelosPort
from encuestas.domain.sync_models import PoliticaDependientes
from encuestas.infrastructure.almacenamiento_json import FileJsonStorage
from encuestas.infrastructure.api_client import RequestsApiClient
from encuestas.infrastructure.config_api import ApiBaseUrlService, ApiConfigStore
from encuestas.infrastructure.fuentes_modelos import ApiModelSource, StaticAssetModelSource
from encuestas.infrastructure.health_probes import DefaultConnectivityProbe


@dataclass
class AppContainer:
    settings: SyncSettings
    storage: AlmacenamientoJsonPort
    notifier: EventNotifier
    observers: ClientesObservers
    cache: MasterDataCache
    store: LocalClientesStore
    api_url_service: ApiBaseUrlService
    api_client: RequestsApiClient
    model_sync: ModelSyncService
    push_queue: PushSyncQueue
    sync_use_case: SyncUseCase
    autenticacion: AutenticacionLocal


def build_container(
    settings: SyncSettings | None = None,
    *,
    storage: AlmacenamientoJsonPort | None = None,
    conectividad: ConectividadPort | None = None,
    config_store: ApiConfigStore | None = None,
) -> AppContainer:
    settings = settings or load_settings()
    storage = storage or FileJsonStorage(settings.data_dir)
    notifier = EventNotifier()
    observers = ClientesObservers([notifier])
    cache = MasterDataCache()
    store = LocalClientesStore(storage)

    api_url_service = ApiBaseUrlService(config_store or ApiConfigStore(), settings.api_url)
    api_client = RequestsApiClient(
        api_url_service.get_api_base_url_or_default,
        timeout_seconds=settings.http_timeout_seconds,
        retry_delay_seconds=settings.retry_delay_seconds,
    )
    conectividad = conectividad or DefaultConnectivityProbe(api_url_service.get_api_base_url_or_default)

    fuente: FuenteModelosPort
    if settings.data_remote_url:
        fuente = StaticAssetModelSource(settings.data_remote_url, timeout_seconds=settings.http_timeout_seconds)
    else:
        fuente = ApiModelSource(api_client)
    model_sync = ModelSyncService(storage, fuente, conectividad, settings.modelos)

    push_queue = PushSyncQueue(
        store,
        api_client,
        conectividad,
        observers,
        politica=PoliticaDependientes.desde_texto(settings.politica_dependientes),
    )
    sync_use_case = SyncUseCase(model_sync, cache, store, push_queue, observers)

    return AppContainer(
        settings=settings,
        storage=storage,
        notifier=notifier,
        observers=observers,
        cache=cache,
        store=store,
        api_url_service=api_url_service,
        api_client=api_client,
        model_sync=model_sync,
        push_queue=push_queue,
        sync_use_case=sync_use_case,
        autenticacion=AutenticacionLocal(settings.credenciales),
    )
