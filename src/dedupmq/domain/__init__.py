"""Domínio: casamento de tópicos, fingerprint, contratos e erros."""
