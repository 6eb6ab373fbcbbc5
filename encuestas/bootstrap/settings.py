from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

APP_DIR_NAME = "EncuestasCampo"
DEFAULT_API_URL = "https://restcontroller-scpi.onrender.com/api"
DEFAULT_DATA_REMOTE_URL = "https://sgvcpa-admin.web.app/data/"
DEFAULT_MODELOS = (
    "clientes",
    "redes-sociales",
    "estados",
    "municipios",
    "parroquias",
    "ciudades",
    "categorias",
    "preguntas",
    "formas-pago",
    "condiciones-pago",
)
DEFAULT_RETRY_DELAY_MS = 600
DEFAULT_HTTP_TIMEOUT_SECONDS = 30.0


def project_root() -> Path:
    return Path(__file__).resolve().parents[2]


def resolve_appdata_dir() -> Path:
    env_dir = os.environ.get("LOCALAPPDATA")
    if env_dir:
        base_dir = Path(env_dir)
    else:
        base_dir = Path.home() / ".local" / "share"
    return base_dir / APP_DIR_NAME


def resolve_log_dir() -> Path:
    candidates: list[Path] = []
    env_dir = os.environ.get("ENCUESTAS_LOG_DIR")
    if env_dir:
        candidates.append(Path(env_dir))
    candidates.append(resolve_appdata_dir() / "logs")
    candidates.append(Path(tempfile.gettempdir()) / APP_DIR_NAME / "logs")

    for candidate in candidates:
        try:
            candidate.mkdir(parents=True, exist_ok=True)
            test_file = candidate / "_write_test.tmp"
            test_file.write_text("ok", encoding="utf-8")
            test_file.unlink(missing_ok=True)
            return candidate
        except OSError:
            continue

    fallback = project_root()
    fallback.mkdir(parents=True, exist_ok=True)
    return fallback


def resolve_data_dir() -> Path:
    env_dir = os.environ.get("ENCUESTAS_DATA_DIR")
    if env_dir:
        return Path(env_dir)
    return resolve_appdata_dir() / "data"


def _safe_int_env(name: str, default: int) -> int:
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _safe_float_env(name: str, default: float) -> float:
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _modelos_env() -> tuple[str, ...]:
    raw_value = os.getenv("ENCUESTAS_MODELOS")
    if not raw_value:
        return DEFAULT_MODELOS
    modelos = tuple(item.strip() for item in raw_value.split(",") if item.strip())
    return modelos or DEFAULT_MODELOS


@dataclass(frozen=True)
class CredencialLocal:
    usuario: str
    password: str


@dataclass(frozen=True)
class SyncSettings:
    data_dir: Path
    api_url: str = DEFAULT_API_URL
    data_remote_url: str = DEFAULT_DATA_REMOTE_URL
    modelos: tuple[str, ...] = DEFAULT_MODELOS
    retry_delay_seconds: float = DEFAULT_RETRY_DELAY_MS / 1000
    http_timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS
    politica_dependientes: str = "raiz_suficiente"
    credenciales: dict[str, CredencialLocal] = field(default_factory=dict)


def load_settings() -> SyncSettings:
    credenciales: dict[str, CredencialLocal] = {}
    usuario = os.getenv("ENCUESTAS_USUARIO")
    if usuario:
        credenciales["user"] = CredencialLocal(usuario, os.getenv("ENCUESTAS_PASSWORD", ""))
    admin = os.getenv("ENCUESTAS_ADMIN_USUARIO")
    if admin:
        credenciales["admin"] = CredencialLocal(admin, os.getenv("ENCUESTAS_ADMIN_PASSWORD", ""))

    return SyncSettings(
        data_dir=resolve_data_dir(),
        api_url=os.getenv("ENCUESTAS_API_URL", DEFAULT_API_URL),
        data_remote_url=os.getenv("ENCUESTAS_DATA_REMOTE_URL", DEFAULT_DATA_REMOTE_URL),
        modelos=_modelos_env(),
        retry_delay_seconds=_safe_int_env("ENCUESTAS_RETRY_DELAY_MS", DEFAULT_RETRY_DELAY_MS) / 1000,
        http_timeout_seconds=_safe_float_env("ENCUESTAS_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT_SECONDS),
        politica_dependientes=os.getenv("ENCUESTAS_POLITICA_DEPENDIENTES", "raiz_suficiente").strip().lower(),
        credenciales=credenciales,
    )
