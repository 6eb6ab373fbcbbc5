from __future__ import annotations

from pathlib import Path

from encuestas.bootstrap import settings


def test_resolve_log_dir_uses_env_path(monkeypatch, tmp_path) -> None:  # noqa: ANN001
    env_dir = tmp_path / "env_logs"
    monkeypatch.setenv("ENCUESTAS_LOG_DIR", str(env_dir))

    resolved = settings.resolve_log_dir()

    assert resolved == env_dir
    assert resolved.exists()


def test_resolve_log_dir_falls_back_to_project_root(monkeypatch, tmp_path) -> None:  # noqa: ANN001
    project_root = tmp_path / "project"
    appdata = tmp_path / "appdata"
    monkeypatch.setenv("LOCALAPPDATA", str(appdata))
    monkeypatch.setattr(settings, "project_root", lambda: project_root)
    monkeypatch.setattr(settings.tempfile, "gettempdir", lambda: str(tmp_path / "tmpbase"))

    original_mkdir = Path.mkdir
    blocked = {appdata / settings.APP_DIR_NAME / "logs", tmp_path / "tmpbase" / settings.APP_DIR_NAME / "logs"}

    def failing_candidate_mkdir(self: Path, mode: int = 0o777, parents: bool = False, exist_ok: bool = False):
        if self in blocked:
            raise OSError("cannot create candidate")
        return original_mkdir(self, mode, parents=parents, exist_ok=exist_ok)

    monkeypatch.setattr(Path, "mkdir", failing_candidate_mkdir)

    resolved = settings.resolve_log_dir()

    assert resolved == project_root
    assert resolved.exists()


def test_load_settings_valores_por_defecto(monkeypatch, tmp_path) -> None:  # noqa: ANN001
    for name in (
        "ENCUESTAS_API_URL",
        "ENCUESTAS_DATA_REMOTE_URL",
        "ENCUESTAS_MODELOS",
        "ENCUESTAS_RETRY_DELAY_MS",
        "ENCUESTAS_HTTP_TIMEOUT",
        "ENCUESTAS_POLITICA_DEPENDIENTES",
        "ENCUESTAS_USUARIO",
        "ENCUESTAS_ADMIN_USUARIO",
    ):
        monkeypatch.delenv(name, raising=False)

    loaded = settings.load_settings()

    assert loaded.data_dir == tmp_path / "appdata" / settings.APP_DIR_NAME / "data"
    assert loaded.api_url == settings.DEFAULT_API_URL
    assert loaded.modelos == settings.DEFAULT_MODELOS
    assert loaded.retry_delay_seconds == 0.6
    assert loaded.http_timeout_seconds == 30.0
    assert loaded.politica_dependientes == "raiz_suficiente"
    assert loaded.credenciales == {}


def test_load_settings_lee_entorno_y_tolera_valores_invalidos(monkeypatch, tmp_path) -> None:  # noqa: ANN001
    monkeypatch.setenv("ENCUESTAS_DATA_DIR", str(tmp_path / "datos"))
    monkeypatch.setenv("ENCUESTAS_MODELOS", "categorias, preguntas,,")
    monkeypatch.setenv("ENCUESTAS_RETRY_DELAY_MS", "no-numero")
    monkeypatch.setenv("ENCUESTAS_HTTP_TIMEOUT", "5.5")
    monkeypatch.setenv("ENCUESTAS_POLITICA_DEPENDIENTES", " ESTRICTA ")
    monkeypatch.setenv("ENCUESTAS_USUARIO", "campo")
    monkeypatch.setenv("ENCUESTAS_PASSWORD", "1234")

    loaded = settings.load_settings()

    assert loaded.data_dir == tmp_path / "datos"
    assert loaded.modelos == ("categorias", "preguntas")
    assert loaded.retry_delay_seconds == settings.DEFAULT_RETRY_DELAY_MS / 1000
    assert loaded.http_timeout_seconds == 5.5
    assert loaded.politica_dependientes == "estricta"
    assert loaded.credenciales == {"user": settings.CredencialLocal("campo", "1234")}
