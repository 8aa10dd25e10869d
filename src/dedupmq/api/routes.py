"""Rotas HTTP do serviço de decisão."""

from __future__ import annotations

import base64
import binascii

from fastapi import APIRouter, Depends, HTTPException, Request, status

from dedupmq.api.dependencies import get_app_settings, get_counters, get_engine
from dedupmq.api.schemas import DecideRequest, DecideResponse
from dedupmq.application.engine import DedupEngine
from dedupmq.config.settings import Settings
from dedupmq.observability.counters import DecisionCounters

router = APIRouter()


def _decode_payload(body: DecideRequest) -> bytes:
    if body.encoding == "base64":
        try:
            return base64.b64decode(body.payload, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="invalid_payload_encoding",
            ) from exc
    return body.payload.encode("utf-8")


@router.get("/health")
def health(
    settings: Settings = Depends(get_app_settings),
    engine: DedupEngine = Depends(get_engine),
) -> dict[str, str]:
    """Healthcheck com disponibilidade do store."""
    store_ok = engine.store_client.ping()
    return {
        "status": "ok",
        "service": settings.service_name,
        "version": settings.version,
        "store": "ok" if store_ok else "unavailable",
    }


@router.post("/v1/messages/decide", response_model=DecideResponse)
def decide_message(
    body: DecideRequest,
    request: Request,
    engine: DedupEngine = Depends(get_engine),
    counters: DecisionCounters = Depends(get_counters),
) -> DecideResponse:
    """Decide PASS/DROP para um evento de mensagem do broker."""
    payload = _decode_payload(body)
    outcome = engine.evaluate(body.topic, payload)
    counters.record(outcome)

    # Lido pelo DecisionTraceMiddleware (headers e log da decisão)
    request.state.decision_outcome = outcome
    return DecideResponse(
        decision=outcome.decision,
        reason=outcome.reason,
        fingerprint=outcome.fingerprint,
    )


@router.get("/v1/stats")
def stats(counters: DecisionCounters = Depends(get_counters)) -> dict[str, int]:
    """Contadores de decisão desde o início do processo."""
    return counters.snapshot()
