from __future__ import annotations

import logging
import re
from collections.abc import Mapping, Sequence
from typing import Any


_KEY_VALUE_PATTERNS = [
    re.compile(
        r'(?i)("?(?:password|contrasena|contraseña|clave|token|access_token|api_key|secret)"?\s*[:=]\s*)("[^"]*"|\'[^\']*\'|[^,\s}\]]+)'  # noqa: E501
    ),
    re.compile(r"(?i)(authorization\s*[:=]\s*bearer\s+)([^\s,;]+)"),
]
_URL_CREDENTIALS_PATTERN = re.compile(r"(?i)(https?://)([^/\s:@]+):([^/\s@]+)@")


def redactar_texto(texto: str) -> str:
    redacted = texto
    for pattern in _KEY_VALUE_PATTERNS:
        redacted = pattern.sub(r"\1<REDACTED>", redacted)
    return _URL_CREDENTIALS_PATTERN.sub(r"\1<REDACTED>@", redacted)


def _redactar_valor(value: Any) -> Any:
    if isinstance(value, str):
        return redactar_texto(value)
    if isinstance(value, Mapping):
        return {
            key: "<REDACTED>" if _es_clave_sensible(key) else _redactar_valor(item)
            for key, item in value.items()
        }
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return [_redactar_valor(item) for item in value]
    return value


def _es_clave_sensible(key: object) -> bool:
    return isinstance(key, str) and key.lower() in {"password", "contrasena", "contraseña", "clave", "token"}


class LoggingSecretsFilter(logging.Filter):
    """Evita que las credenciales locales o tokens de la API lleguen a disco."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = redactar_texto(record.msg)

        if isinstance(record.args, Mapping):
            record.args = {key: _redactar_valor(value) for key, value in record.args.items()}
        elif isinstance(record.args, tuple):
            record.args = tuple(_redactar_valor(value) for value in record.args)

        extra_payload = getattr(record, "extra", None)
        if isinstance(extra_payload, Mapping):
            record.extra = _redactar_valor(extra_payload)

        return True
