from __future__ import annotations

import ast
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
PACKAGE_ROOT = PROJECT_ROOT / "encuestas"

# Capa -> prefijos que no puede importar.
FORBIDDEN_IMPORTS = {
    "domain": ("encuestas.application", "encuestas.infrastructure", "encuestas.ui", "requests", "PySide6"),
    "application": ("encuestas.infrastructure", "encuestas.ui", "requests", "PySide6"),
    "infrastructure": ("encuestas.application", "encuestas.ui", "PySide6"),
}


def _imported_modules(py_file: Path) -> list[str]:
    tree = ast.parse(py_file.read_text(encoding="utf-8"), filename=str(py_file))
    modules: list[str] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            modules.extend(alias.name for alias in node.names)
        elif isinstance(node, ast.ImportFrom) and node.level == 0 and node.module:
            modules.append(node.module)
    return modules


def test_capas_respetan_dependencias() -> None:
    violations: list[str] = []
    for layer, forbidden in FORBIDDEN_IMPORTS.items():
        for py_file in sorted((PACKAGE_ROOT / layer).rglob("*.py")):
            for module in _imported_modules(py_file):
                if module.startswith(forbidden):
                    violations.append(f"{py_file.relative_to(PROJECT_ROOT).as_posix()} -> {module}")

    assert not violations, "Imports fuera de capa:\n" + "\n".join(violations)


def test_sin_print_en_el_paquete() -> None:
    violations: list[str] = []
    for py_file in sorted(PACKAGE_ROOT.rglob("*.py")):
        tree = ast.parse(py_file.read_text(encoding="utf-8"), filename=str(py_file))
        for node in ast.walk(tree):
            if isinstance(node, ast.Call) and isinstance(node.func, ast.Name) and node.func.id == "print":
                violations.append(f"{py_file.relative_to(PROJECT_ROOT).as_posix()}:{node.lineno}")

    assert not violations, "Se detectaron usos prohibidos de print():\n" + "\n".join(violations)
