from __future__ import annotations

import logging
import socket
import time
from typing import Callable
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)

DEFAULT_DNS_HOST = ("8.8.8.8", 53)


def _host_port(url: str) -> tuple[str, int] | None:
    parts = urlsplit(url)
    if not parts.hostname:
        return None
    if parts.port:
        return parts.hostname, parts.port
    return parts.hostname, 443 if parts.scheme == "https" else 80


class DefaultConnectivityProbe:
    """Comprueba que hay red y que el host de la API acepta conexiones TCP."""

    def __init__(
        self,
        api_url_provider: Callable[[], str] | None = None,
        *,
        timeout_seconds: float = 3.0,
        connector: Callable[..., socket.socket] = socket.create_connection,
    ) -> None:
        self._api_url_provider = api_url_provider
        self._timeout_seconds = timeout_seconds
        self._connector = connector

    def _can_connect(self, address: tuple[str, int]) -> bool:
        try:
            self._connector(address, timeout=self._timeout_seconds).close()
            return True
        except OSError:
            return False

    def check(self) -> tuple[bool, bool, float | None, str]:
        started = time.perf_counter()
        internet_ok = self._can_connect(DEFAULT_DNS_HOST)
        api_reachable = False
        latency_ms: float | None = None

        address = _host_port(self._api_url_provider()) if self._api_url_provider else None
        if address is not None:
            api_reachable = self._can_connect(address)
            if api_reachable:
                latency_ms = (time.perf_counter() - started) * 1000

        if latency_ms is None:
            return internet_ok, api_reachable, None, "Latencia no disponible (sin conexión API)."
        return internet_ok, api_reachable, latency_ms, f"Latencia aproximada API: {latency_ms:.0f} ms."

    def is_connected(self) -> bool:
        internet_ok, api_reachable, _, message = self.check()
        logger.info("Conectividad: internet=%s api=%s (%s)", internet_ok, api_reachable, message)
        return internet_ok or api_reachable
