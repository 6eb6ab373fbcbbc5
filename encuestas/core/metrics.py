from __future__ import annotations

from dataclasses import dataclass
from functools import wraps
from threading import Lock
from time import perf_counter
from typing import Any, Callable


@dataclass
class _Latencia:
    count: int = 0
    total: float = 0.0
    last: float = 0.0
    max: float = 0.0

    def anotar(self, milisegundos: float) -> None:
        self.count += 1
        self.total += milisegundos
        self.last = milisegundos
        self.max = max(self.max, milisegundos)

    def resumen(self) -> dict[str, float]:
        return {"count": self.count, "last": self.last, "avg": self.total / self.count, "max": self.max}


class MetricsRegistry:
    """Contadores y latencias en memoria de las ejecuciones de pull y push.

    De cada latencia solo se guarda el agregado, no las muestras.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._contadores: dict[str, int] = {}
        self._latencias: dict[str, _Latencia] = {}

    def contador(self, nombre: str) -> int:
        with self._lock:
            return self._contadores.get(nombre, 0)

    def incrementar(self, nombre: str, valor: int = 1) -> None:
        if valor <= 0:
            return
        with self._lock:
            self._contadores[nombre] = self._contadores.get(nombre, 0) + valor

    def registrar_tiempo(self, nombre: str, milisegundos: float) -> None:
        with self._lock:
            self._latencias.setdefault(nombre, _Latencia()).anotar(milisegundos)

    def snapshot(self) -> dict[str, dict[str, Any]]:
        with self._lock:
            return {
                "counters": dict(self._contadores),
                "timings_ms": {nombre: latencia.resumen() for nombre, latencia in self._latencias.items()},
            }


metrics_registry = MetricsRegistry()


def medir_tiempo(nombre_metrica: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            inicio = perf_counter()
            try:
                return func(*args, **kwargs)
            finally:
                # Se busca el registro del módulo en cada llamada: los tests lo sustituyen.
                metrics_registry.registrar_tiempo(nombre_metrica, (perf_counter() - inicio) * 1000)

        return wrapper

    return decorator
