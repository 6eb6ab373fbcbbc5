from __future__ import annotations

import logging
import traceback

from PySide6.QtCore import QObject, Signal, Slot

from encuestas.application.sync_use_case import SyncUseCase
from encuestas.domain.models import DatosMaestros
from encuestas.domain.sync_models import ResultadoPush

logger = logging.getLogger(__name__)


class QtClientesObserver(QObject):
    """Traduce ``notify_changed`` a una señal Qt para refrescar listados."""

    clientes_actualizados = Signal()

    def notify_changed(self) -> None:
        self.clientes_actualizados.emit()


class PullWorker(QObject):
    progress = Signal(str, object, object)
    finished = Signal(DatosMaestros)
    failed = Signal(object)

    def __init__(self, sync_use_case: SyncUseCase) -> None:
        super().__init__()
        self._sync_use_case = sync_use_case

    def _emit_progress(self, mensaje: str, actual: int | None, total: int | None) -> None:
        self.progress.emit(mensaje, actual, total)

    @Slot()
    def run(self) -> None:
        try:
            datos = self._sync_use_case.arrancar(self._emit_progress)
        except Exception as exc:
            logger.exception("Error durante la descarga de datos maestros")
            self.failed.emit({"error": exc, "details": traceback.format_exc()})
            return
        self.finished.emit(datos)


class PushWorker(QObject):
    finished = Signal(ResultadoPush)
    failed = Signal(object)

    def __init__(self, sync_use_case: SyncUseCase) -> None:
        super().__init__()
        self._sync_use_case = sync_use_case

    @Slot()
    def run(self) -> None:
        try:
            resultado = self._sync_use_case.push()
        except Exception as exc:
            logger.exception("Error durante la subida de clientes")
            self.failed.emit({"error": exc, "details": traceback.format_exc()})
            return
        self.finished.emit(resultado)
