from __future__ import annotations

import hashlib


ZERO_HASH = bytes(32)


def commitment(seed: bytes) -> bytes:
    return hashlib.sha256(seed).digest()


def digest(payload: bytes) -> bytes:
    return hashlib.sha256(payload).digest()
