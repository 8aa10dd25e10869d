"""Adapters de host: ponte entre o broker e o engine."""
