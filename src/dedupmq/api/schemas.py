"""Contratos Pydantic do serviço HTTP de decisão."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from dedupmq.application.engine import DecisionReason
from dedupmq.domain.seen_store import Decision


class DecideRequest(BaseModel):
    """Evento de mensagem recebido do broker."""

    topic: str = Field(..., min_length=1)
    """Tópico de publicação."""

    payload: str = ""
    """Payload em texto (utf-8) ou base64, conforme encoding."""

    encoding: Literal["utf-8", "base64"] = "utf-8"


class DecideResponse(BaseModel):
    """Decisão do engine para o evento."""

    decision: Decision
    reason: DecisionReason
    fingerprint: str | None = None
