"""Fingerprint de payload para chave de dedupe.

BLAKE2b com digest de 8 bytes: passada única, largura fixa (16 hex).
Colisões são possíveis e aceitas; não é integridade criptográfica.
"""

from __future__ import annotations

import hashlib

FINGERPRINT_DIGEST_SIZE = 8
FINGERPRINT_LENGTH = FINGERPRINT_DIGEST_SIZE * 2


def fingerprint(payload: bytes | bytearray | memoryview) -> str:
    """Retorna o fingerprint hexadecimal (minúsculo) do payload.

    Payload vazio é entrada válida e gera fingerprint estável.
    """
    return hashlib.blake2b(payload, digest_size=FINGERPRINT_DIGEST_SIZE).hexdigest()
