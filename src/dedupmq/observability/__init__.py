"""Observabilidade: logging estruturado, correlation_id e contadores."""
