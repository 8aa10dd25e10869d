"""Middleware de rastreio das decisões HTTP.

correlation_id de cada request, em ordem de preferência:
1. header x-correlation-id
2. header x-broker-message-id (id da mensagem no broker chamador)
3. gerado (uuid4 hex)

Quando a rota deixa um DecisionOutcome em request.state.decision_outcome, a
resposta recebe x-dedupmq-decision e x-dedupmq-reason, e a decisão é logada
com a latência. Proxies e logs de acesso leem a decisão sem abrir o corpo.
"""

from __future__ import annotations

import logging
import time
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

# logging.py importa get_correlation_id daqui; logger direto evita ciclo
logger = logging.getLogger(__name__)

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")

CORRELATION_HEADER = "x-correlation-id"
BROKER_MESSAGE_HEADER = "x-broker-message-id"
DECISION_HEADER = "x-dedupmq-decision"
REASON_HEADER = "x-dedupmq-reason"


def get_correlation_id() -> str:
    """Retorna o correlation_id corrente (ou vazio)."""

    return _correlation_id.get()


def _resolve_correlation_id(request: Request) -> str:
    return (
        request.headers.get(CORRELATION_HEADER)
        or request.headers.get(BROKER_MESSAGE_HEADER)
        or uuid.uuid4().hex
    )


class DecisionTraceMiddleware(BaseHTTPMiddleware):
    """Correlaciona cada request com a mensagem do broker e expõe a decisão."""

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        correlation_id = _resolve_correlation_id(request)
        token = _correlation_id.set(correlation_id)
        started = time.perf_counter()
        try:
            response = await call_next(request)
            outcome = getattr(request.state, "decision_outcome", None)
            if outcome is not None:
                response.headers[DECISION_HEADER] = outcome.decision.value
                response.headers[REASON_HEADER] = outcome.reason.value
                logger.info(
                    "decision_served",
                    extra={
                        "decision": outcome.decision.value,
                        "reason": outcome.reason.value,
                        "fingerprint": outcome.fingerprint,
                        "duration_ms": round((time.perf_counter() - started) * 1000, 3),
                    },
                )
        finally:
            _correlation_id.reset(token)

        response.headers[CORRELATION_HEADER] = correlation_id
        return response
