"""Configuração de logging estruturado (JSON)."""

from __future__ import annotations

import logging

from pythonjsonlogger.json import JsonFormatter

from dedupmq.observability.middleware import get_correlation_id

_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(service)s] %(message)s"


class CorrelationIdFilter(logging.Filter):
    """Insere correlation_id e service no record de log.

    Importante: nunca adicionar payloads brutos nos logs.
    """

    def __init__(self, service_name: str) -> None:
        super().__init__()
        self._service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        existing = getattr(record, "correlation_id", None)
        record.correlation_id = existing if existing else get_correlation_id()
        record.service = self._service_name
        return True


class _DedupmqHandler(logging.StreamHandler):
    """Handler instalado por configure_logging (substituível em nova chamada)."""


def configure_logging(level: str, service_name: str, fmt: str = "json") -> None:
    """Configura logging JSON (ou texto) com campos padrão do serviço.

    Substitui apenas o handler instalado por uma chamada anterior; handlers do
    processo hospedeiro (broker, servidor ASGI) permanecem.
    """

    level = level.upper()
    if fmt.lower() == "text":
        formatter: logging.Formatter = logging.Formatter(_TEXT_FORMAT)
    else:
        formatter = JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s %(correlation_id)s %(service)s",
            rename_fields={"levelname": "level", "name": "logger"},
        )

    handler = _DedupmqHandler()
    handler.setLevel(level)
    handler.setFormatter(formatter)
    handler.addFilter(CorrelationIdFilter(service_name))

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [h for h in root.handlers if not isinstance(h, _DedupmqHandler)]
    root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Retorna logger simples; o filtro injeta service/correlation_id."""

    return logging.getLogger(name)
