"""Camada de aplicação: engine de decisão de dedupe."""
