from __future__ import annotations

import runpy

import pytest


def test_main_module_delegates_to_cli(monkeypatch) -> None:  # noqa: ANN001
    monkeypatch.setattr("encuestas.entrypoints.cli.main", lambda: 0)

    with pytest.raises(SystemExit) as exit_info:
        runpy.run_module("encuestas.__main__", run_name="__main__")

    assert exit_info.value.code == 0


def test_main_module_convierte_excepcion_en_incidente(monkeypatch, capsys) -> None:  # noqa: ANN001
    def _explota() -> int:
        raise RuntimeError("boom")

    monkeypatch.setattr("encuestas.entrypoints.cli.main", _explota)
    monkeypatch.setattr("encuestas.bootstrap.exception_handler.manejar_excepcion_global", lambda *a, **k: "INC-X")

    with pytest.raises(SystemExit) as exit_info:
        runpy.run_module("encuestas.__main__", run_name="__main__")

    assert exit_info.value.code == 2
    assert "INC-X" in capsys.readouterr().err
