"""Dependências injetadas nas rotas."""

from __future__ import annotations

from fastapi import Request

from dedupmq.application.engine import DedupEngine
from dedupmq.config.settings import Settings
from dedupmq.observability.counters import DecisionCounters


def get_app_settings(request: Request) -> Settings:
    """Retorna settings da aplicação."""

    return request.app.state.settings


def get_engine(request: Request) -> DedupEngine:
    """Retorna o engine de dedupe ativo."""

    return request.app.state.engine


def get_counters(request: Request) -> DecisionCounters:
    """Retorna os contadores de decisão."""

    return request.app.state.counters
