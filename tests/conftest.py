from __future__ import annotations

import importlib
import os
import platform
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def _is_linux_headless() -> bool:
    if platform.system() != "Linux":
        return False
    return not (os.environ.get("DISPLAY") or os.environ.get("WAYLAND_DISPLAY"))


if _is_linux_headless():
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    os.environ.setdefault("QT_OPENGL", "software")


_UI_BACKEND_ERROR: str | None = None


def _detect_ui_backend_issue() -> str | None:
    try:
        importlib.import_module("PySide6")
        importlib.import_module("PySide6.QtCore")
        return None
    except Exception as exc:  # pragma: no cover - depende del host de ejecución
        return f"PySide6/Qt no disponible para tests UI: {exc}"


def pytest_configure(config: pytest.Config) -> None:
    global _UI_BACKEND_ERROR
    config.addinivalue_line("markers", "ui: tests de interfaz PySide6")
    _UI_BACKEND_ERROR = _detect_ui_backend_issue()


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    skip_ui = None
    if _UI_BACKEND_ERROR is not None:
        skip_ui = pytest.mark.skip(reason=_UI_BACKEND_ERROR)

    for item in items:
        if "tests/ui/" in item.nodeid:
            item.add_marker(pytest.mark.ui)
        if skip_ui is not None and "ui" in item.keywords:
            item.add_marker(skip_ui)


from encuestas.application.clientes_store import LocalClientesStore
from encuestas.core.metrics import MetricsRegistry
from encuestas.infrastructure.almacenamiento_json import FileJsonStorage, KeyValueJsonStorage

FIXED_NOW = datetime(2025, 3, 1, 12, 30, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _aislar_entorno(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    # Nada de lo que ejecuten los tests debe tocar el appdata real del usuario.
    monkeypatch.setenv("LOCALAPPDATA", str(tmp_path / "appdata"))
    monkeypatch.delenv("ENCUESTAS_DATA_DIR", raising=False)
    monkeypatch.delenv("ENCUESTAS_LOG_DIR", raising=False)


@pytest.fixture(autouse=True)
def metrics(monkeypatch: pytest.MonkeyPatch) -> MetricsRegistry:
    registry = MetricsRegistry()
    monkeypatch.setattr("encuestas.core.metrics.metrics_registry", registry)
    monkeypatch.setattr("encuestas.application.sync_clientes.metrics_registry", registry)
    monkeypatch.setattr("encuestas.application.sync_modelos.metrics_registry", registry)
    return registry


@pytest.fixture
def file_storage(tmp_path: Path) -> FileJsonStorage:
    return FileJsonStorage(tmp_path / "data")


@pytest.fixture
def memory_storage() -> KeyValueJsonStorage:
    return KeyValueJsonStorage({}, durable=True)


@pytest.fixture
def store(file_storage: FileJsonStorage) -> LocalClientesStore:
    return LocalClientesStore(file_storage, clock=lambda: FIXED_NOW)
