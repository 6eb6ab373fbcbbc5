from __future__ import annotations

import argparse
import faulthandler
import logging
import sys
from pathlib import Path
from typing import Callable, TextIO

from encuestas.bootstrap.container import AppContainer, build_container
from encuestas.bootstrap.exception_handler import install_exception_hook
from encuestas.bootstrap.logging import configure_logging
from encuestas.bootstrap.settings import resolve_log_dir
from encuestas.core.errors import PersistenceError
from encuestas.infrastructure.api_errors import ApiConfigError

logger = logging.getLogger(__name__)

ContainerFactory = Callable[[], AppContainer]


def _run_selfcheck(container: AppContainer, log_dir: Path, out: TextIO) -> int:
    errors = 0
    storage = container.storage

    try:
        storage.write_json("_selfcheck.json", {"ok": True})
        if storage.read_json("_selfcheck.json") != {"ok": True}:
            logger.error("El almacenamiento local no devolvió lo escrito")
            errors += 1
        storage.remove("_selfcheck.json")
    except PersistenceError as exc:
        logger.error("Almacenamiento local no disponible: %s", exc)
        errors += 1

    base_url = container.api_url_service.get_api_base_url_or_default()
    if not base_url:
        logger.error("No hay URL de API configurada")
        errors += 1
    else:
        logger.info("URL de API: %s", base_url)

    if errors:
        out.write(f"Selfcheck falló con {errors} error(es). Revisa {log_dir}\n")
        return 1
    out.write("Selfcheck OK.\n")
    return 0


def _progreso(out: TextIO) -> Callable[[str, int | None, int | None], None]:
    def _escribir(mensaje: str, actual: int | None, total: int | None) -> None:
        if actual is None or total is None:
            out.write(f"{mensaje}\n")
        else:
            out.write(f"[{actual}/{total}] {mensaje}\n")

    return _escribir


def _cmd_pull(container: AppContainer, args: argparse.Namespace, out: TextIO) -> int:
    datos = container.sync_use_case.arrancar(_progreso(out))
    for coleccion, cantidad in datos.conteos().items():
        out.write(f"{coleccion}: {cantidad}\n")
    return 0


def _cmd_push(container: AppContainer, args: argparse.Namespace, out: TextIO) -> int:
    resultado = container.sync_use_case.push()
    out.write(resultado.mensaje_usuario() + "\n")
    if args.detalle:
        for log in resultado.clientes:
            out.write(f"  cliente {log.id_local}: {log.estado} (servidor={log.id_servidor})\n")
            for paso in log.pasos_fallidos:
                out.write(f"    {paso.paso}: {paso.error}\n")
    if not resultado.ok:
        return 3
    return 0 if resultado.resumen.fallo == 0 else 1


def _cmd_clientes(container: AppContainer, args: argparse.Namespace, out: TextIO) -> int:
    clientes = container.sync_use_case.clientes()
    if not clientes:
        out.write("No hay clientes registrados.\n")
        return 0
    for cliente in clientes:
        estado = "sincronizado" if cliente.get("fechaSincronizacion") else "pendiente"
        out.write(f"{cliente.get('idCliente')}\t{cliente.get('nombre', '')}\t{estado}\n")
    return 0


def _cmd_configurar_url(container: AppContainer, args: argparse.Namespace, out: TextIO) -> int:
    if args.borrar:
        container.api_url_service.clear_api_base_url()
        out.write("URL de la API restablecida al valor por defecto.\n")
        return 0
    if not args.url:
        out.write(f"URL actual: {container.api_url_service.get_api_base_url_or_default()}\n")
        return 0
    try:
        guardada = container.api_url_service.set_api_base_url(args.url)
    except ApiConfigError as exc:
        out.write(f"{exc}\n")
        return 2
    out.write(f"URL de la API guardada: {guardada}\n")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="encuestas", description="Sincronización de encuestas de campo")
    parser.add_argument("--selfcheck", action="store_true", help="Valida almacenamiento y configuración")
    parser.add_argument("--verbose", action="store_true", help="Muestra advertencias también por consola")
    subparsers = parser.add_subparsers(dest="comando")

    subparsers.add_parser("pull", help="Descarga los datos maestros y carga el cache").set_defaults(handler=_cmd_pull)

    push = subparsers.add_parser("push", help="Sube los clientes pendientes a la API")
    push.add_argument("--detalle", action="store_true", help="Lista el resultado por cliente")
    push.set_defaults(handler=_cmd_push)

    subparsers.add_parser("clientes", help="Lista los clientes locales").set_defaults(handler=_cmd_clientes)

    configurar = subparsers.add_parser("configurar-url", help="Valida y guarda la URL base de la API")
    configurar.add_argument("url", nargs="?", help="URL base; sin valor muestra la actual")
    configurar.add_argument("--borrar", action="store_true", help="Vuelve a la URL por defecto")
    configurar.set_defaults(handler=_cmd_configurar_url)
    return parser


def main(
    argv: list[str] | None = None,
    *,
    container_factory: ContainerFactory = build_container,
    out: TextIO | None = None,
) -> int:
    out = out or sys.stdout
    parser = build_parser()
    args = parser.parse_args(argv)

    log_dir = resolve_log_dir()
    configure_logging(log_dir, console=args.verbose)
    install_exception_hook()
    faulthandler.enable()

    logger.info("Log dir: %s", log_dir)
    logger.info("Python: %s", sys.version)

    container = container_factory()
    if args.selfcheck:
        return _run_selfcheck(container, log_dir, out)
    handler = getattr(args, "handler", None)
    if handler is None:
        parser.print_help(out)
        return 2
    return handler(container, args, out)
