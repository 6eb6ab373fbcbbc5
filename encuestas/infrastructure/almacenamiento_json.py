from __future__ import annotations

import json
import logging
import os
import re
import tempfile
from collections.abc import MutableMapping
from pathlib import Path
from typing import Any

from encuestas.core.errors import PersistenceError

logger = logging.getLogger(__name__)

_KEY_SEPARATORS = re.compile(r"[/\\]")
_KEY_INVALID_CHARS = re.compile(r"[^a-zA-Z0-9_]")


def _dumps(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


def _parse(name: str, content: str | None, fallback: Any) -> Any:
    if content is None or not content.strip():
        return fallback
    try:
        return json.loads(content)
    except json.JSONDecodeError as exc:
        logger.warning("No se pudo interpretar %s: %s", name, exc)
        return fallback


class FileJsonStorage:
    """Blobs JSON con nombre dentro de un directorio de datos.

    Es el respaldo de una caché, no un libro mayor: las lecturas fallidas
    devuelven ``fallback`` y nunca lanzan.
    """

    es_duradero = True

    def __init__(self, data_dir: Path) -> None:
        self._data_dir = Path(data_dir)

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def path_for(self, name: str) -> Path:
        return self._data_dir / name

    def read_json(self, name: str, fallback: Any = None) -> Any:
        path = self.path_for(name)
        try:
            if not path.exists():
                return fallback
            content = path.read_text(encoding="utf-8")
        except OSError as exc:
            logger.warning("Error leyendo %s: %s", name, exc)
            return fallback
        return _parse(name, content, fallback)

    def write_json(self, name: str, value: Any) -> None:
        content = _dumps(value)
        target = self.path_for(name)
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{name}.", suffix=".tmp", dir=self._data_dir)
        except OSError as exc:
            raise PersistenceError(f"No se pudo preparar {self._data_dir}: {exc}") from exc
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(content)
            os.replace(tmp_name, target)
        except OSError as exc:
            Path(tmp_name).unlink(missing_ok=True)
            raise PersistenceError(f"No se pudo escribir {name}: {exc}") from exc

    def exists(self, name: str) -> bool:
        try:
            return self.path_for(name).exists()
        except OSError:
            return False

    def remove(self, name: str) -> None:
        try:
            self.path_for(name).unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Error eliminando %s: %s", name, exc)


class KeyValueJsonStorage:
    """Mismo contrato sobre un almacén clave-valor (p. ej. ``shelve`` o un dict)."""

    def __init__(
        self,
        backend: MutableMapping[str, str] | None = None,
        *,
        namespace: str = "app_data/",
        durable: bool | None = None,
    ) -> None:
        self._backend: MutableMapping[str, str] = backend if backend is not None else {}
        self._namespace = namespace
        self._durable = durable if durable is not None else backend is not None

    @property
    def es_duradero(self) -> bool:
        return self._durable

    def key_for(self, name: str) -> str:
        path = f"{self._namespace}{name}"
        return _KEY_INVALID_CHARS.sub("", _KEY_SEPARATORS.sub("_", path))

    def read_json(self, name: str, fallback: Any = None) -> Any:
        try:
            content = self._backend.get(self.key_for(name))
        except Exception as exc:  # noqa: BLE001
            logger.warning("Error leyendo %s: %s", name, exc)
            return fallback
        return _parse(name, content, fallback)

    def write_json(self, name: str, value: Any) -> None:
        content = _dumps(value)
        try:
            self._backend[self.key_for(name)] = content
        except Exception as exc:  # noqa: BLE001
            raise PersistenceError(f"No se pudo escribir {name}: {exc}") from exc

    def exists(self, name: str) -> bool:
        try:
            return self.key_for(name) in self._backend
        except Exception:  # noqa: BLE001
            return False

    def remove(self, name: str) -> None:
        try:
            self._backend.pop(self.key_for(name), None)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Error eliminando %s: %s", name, exc)
