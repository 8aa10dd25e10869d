"""Testes unitários para domain/fingerprint.py."""

from __future__ import annotations

import os
import string

from dedupmq.domain.fingerprint import FINGERPRINT_LENGTH, fingerprint


class TestFingerprint:
    """Determinismo, largura fixa e baixa taxa de colisão."""

    def test_same_payload_same_fingerprint(self) -> None:
        payload = b'{"temp": 22.5}'
        assert fingerprint(payload) == fingerprint(payload)

    def test_equal_bytes_from_different_objects(self) -> None:
        assert fingerprint(b"22.5") == fingerprint(bytearray(b"22.5"))
        assert fingerprint(b"22.5") == fingerprint(memoryview(b"22.5"))

    def test_different_payloads_differ(self) -> None:
        assert fingerprint(b"22.5") != fingerprint(b"22.6")

    def test_fixed_width_hex(self) -> None:
        for payload in (b"", b"x", os.urandom(4096)):
            digest = fingerprint(payload)
            assert len(digest) == FINGERPRINT_LENGTH == 16
            assert set(digest) <= set(string.hexdigits.lower())

    def test_empty_payload_is_stable(self) -> None:
        """Payload vazio é válido e gera valor bem definido."""
        assert fingerprint(b"") == fingerprint(b"")
        assert fingerprint(b"") != fingerprint(b"\x00")

    def test_low_collision_rate_on_realistic_payloads(self) -> None:
        payloads = {f'{{"sensor": "room{i}", "temp": {i / 10:.1f}}}'.encode() for i in range(20000)}
        digests = {fingerprint(p) for p in payloads}
        assert len(digests) == len(payloads)

    def test_depends_only_on_payload_bytes(self) -> None:
        """Pequena alteração de um byte muda o fingerprint."""
        base = bytearray(b"a" * 1024)
        original = fingerprint(base)
        base[512] = ord("b")
        assert fingerprint(base) != original
