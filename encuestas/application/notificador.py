from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from encuestas.domain.ports import ClientesObserverPort

logger = logging.getLogger(__name__)

CLIENTES_ACTUALIZADOS = "clientesActualizados"

Handler = Callable[[Any], None]


class EventNotifier:
    """Publicación/suscripción en proceso.

    Los manejadores se invocan en orden de registro; la excepción de uno no
    impide que el resto reciba el evento.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = {}

    def on(self, event: str, handler: Handler) -> Callable[[], None]:
        self._handlers.setdefault(event, []).append(handler)
        return lambda: self.off(event, handler)

    def off(self, event: str, handler: Handler) -> None:
        handlers = self._handlers.get(event)
        if not handlers:
            return
        self._handlers[event] = [registered for registered in handlers if registered is not handler]

    def emit(self, event: str, payload: Any = None) -> None:
        for handler in list(self._handlers.get(event, ())):
            try:
                handler(payload)
            except Exception:  # noqa: BLE001
                logger.exception("Error en manejador del evento %s", event)

    def handler_count(self, event: str) -> int:
        return len(self._handlers.get(event, ()))

    def notify_changed(self) -> None:
        self.emit(CLIENTES_ACTUALIZADOS)


class ClientesObservers:
    """Colección explícita de observadores interesados en cambios de clientes."""

    def __init__(self, observers: list[ClientesObserverPort] | None = None) -> None:
        self._observers: list[ClientesObserverPort] = list(observers or [])

    def add(self, observer: ClientesObserverPort) -> None:
        self._observers.append(observer)

    def remove(self, observer: ClientesObserverPort) -> None:
        self._observers = [registered for registered in self._observers if registered is not observer]

    def notify_changed(self) -> None:
        for observer in list(self._observers):
            try:
                observer.notify_changed()
            except Exception:  # noqa: BLE001
                logger.exception("Error notificando cambios de clientes a %r", observer)
