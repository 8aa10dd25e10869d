"""Configurações centralizadas do dedupmq.

Uso típico:
    from dedupmq.config import get_settings
"""

from dedupmq.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
