from __future__ import annotations

import pytest

from encuestas.application.cache_maestros import MasterDataCache
from encuestas.application.clientes_store import LocalClientesStore
from encuestas.application.sync_use_case import SyncUseCase
from encuestas.core.errors import ValidationError
from encuestas.core.metrics import MetricsRegistry
from encuestas.domain.sync_models import ResultadoPull, ResultadoPush, ResumenPush


class _ModelSyncFake:
    def __init__(self) -> None:
        self.progresos: list[object] = []

    def sync(self, on_progress=None) -> ResultadoPull:  # noqa: ANN001
        self.progresos.append(on_progress)
        return ResultadoPull(datos={"categorias": [{"idCategoria": 1}], "preguntas": []})


class _PushQueueFake:
    def __init__(self, resultado: ResultadoPush) -> None:
        self._resultado = resultado
        self.runs = 0

    def run(self) -> ResultadoPush:
        self.runs += 1
        return self._resultado


class _ObserverFake:
    def __init__(self) -> None:
        self.calls = 0

    def notify_changed(self) -> None:
        self.calls += 1


def _use_case(store: LocalClientesStore, resultado: ResultadoPush | None = None) -> tuple[SyncUseCase, _PushQueueFake, _ObserverFake]:
    queue = _PushQueueFake(resultado or ResultadoPush(ok=True, resumen=ResumenPush(total=1, ok=1)))
    observer = _ObserverFake()
    use_case = SyncUseCase(_ModelSyncFake(), MasterDataCache(), store, queue, observer)
    return use_case, queue, observer


def test_arrancar_carga_el_cache_y_mide_latencia(store: LocalClientesStore, metrics: MetricsRegistry) -> None:
    use_case, _, _ = _use_case(store)

    datos = use_case.arrancar()

    assert datos.loaded is True
    assert datos.categorias == [{"idCategoria": 1}]
    assert use_case.cache.is_loaded()
    assert metrics.snapshot()["timings_ms"]["latency.arranque_ms"]["count"] == 1


def test_crear_cliente_guarda_respuestas_y_notifica(store: LocalClientesStore) -> None:
    use_case, _, observer = _use_case(store)

    id_cliente = use_case.crear_cliente({"nombre": "Bodegón"}, {"preguntas": []})

    assert id_cliente == "1"
    assert store.read_answer_bundle("1") == {"preguntas": []}
    assert observer.calls == 1
    assert [c["nombre"] for c in use_case.clientes()] == ["Bodegón"]


def test_crear_cliente_sin_nombre_es_invalido(store: LocalClientesStore) -> None:
    use_case, _, observer = _use_case(store)

    with pytest.raises(ValidationError):
        use_case.crear_cliente({"nombre": "   "})

    assert store.read_all_client_records() == []
    assert observer.calls == 0


def test_eliminar_cliente(store: LocalClientesStore) -> None:
    use_case, _, observer = _use_case(store)
    id_cliente = use_case.crear_cliente({"nombre": "Temporal"})

    assert use_case.eliminar_cliente(id_cliente) is True
    assert use_case.eliminar_cliente(id_cliente) is False
    assert observer.calls == 2


def test_guardar_y_sincronizar_offline_conserva_el_registro(store: LocalClientesStore, metrics: MetricsRegistry) -> None:
    use_case, queue, _ = _use_case(store, ResultadoPush(ok=False, razon="sin_conexion"))

    resultado = use_case.guardar_y_sincronizar({"nombre": "Sin señal"})

    assert resultado.razon == "sin_conexion"
    assert queue.runs == 1
    assert store.pending_client_records()[0]["nombre"] == "Sin señal"
    assert metrics.snapshot()["timings_ms"]["latency.push_ms"]["count"] == 1
