from __future__ import annotations

import hmac
import logging
from collections.abc import Mapping

from encuestas.bootstrap.settings import CredencialLocal
from encuestas.core.errors import ValidationError

logger = logging.getLogger(__name__)

ROL_ADMIN = "admin"
ROL_USER = "user"


class AutenticacionLocal:
    """Verificación contra pares usuario/contraseña configurados localmente."""

    def __init__(self, credenciales: Mapping[str, CredencialLocal]) -> None:
        self._credenciales = dict(credenciales)

    def verificar(self, usuario: str, password: str) -> str | None:
        if not (usuario or "").strip() or not (password or "").strip():
            raise ValidationError("Todos los campos son obligatorios")
        # admin tiene prioridad si ambos pares coinciden.
        for rol in (ROL_ADMIN, ROL_USER):
            credencial = self._credenciales.get(rol)
            if credencial is None:
                continue
            if hmac.compare_digest(usuario, credencial.usuario) and hmac.compare_digest(password, credencial.password):
                logger.info("Acceso concedido con rol %s", rol)
                return rol
        logger.info("Error de acceso: usuario o contraseña inválida")
        return None
