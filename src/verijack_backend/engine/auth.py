from __future__ import annotations

import logging

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import encode_dss_signature

from verijack_backend.engine.codec import encode_action
from verijack_backend.engine.models import SIGNATURE_BYTES, Action


logger = logging.getLogger(__name__)

# order of the secp256k1 group
SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
SECP256K1_HALF_N = SECP256K1_N // 2


def load_public_key(encoded_point: bytes) -> ec.EllipticCurvePublicKey | None:
    try:
        return ec.EllipticCurvePublicKey.from_encoded_point(ec.SECP256K1(), bytes(encoded_point))
    except (ValueError, TypeError):
        return None


def verify_action_signature(action: Action, signature: bytes, pubkey: bytes) -> bool:
    """Check a 64-byte ``r || s`` secp256k1 signature over the canonical action bytes.

    Only the low-``s`` form of a signature is accepted. Never raises: a malformed key
    or signature is simply not a valid signature.
    """
    if len(signature) != SIGNATURE_BYTES:
        return False
    r = int.from_bytes(signature[:32], byteorder="big")
    s = int.from_bytes(signature[32:], byteorder="big")
    if not (0 < r < SECP256K1_N and 0 < s <= SECP256K1_HALF_N):
        return False

    key = load_public_key(pubkey)
    if key is None:
        logger.debug("rejecting signature against malformed public key")
        return False

    try:
        key.verify(encode_dss_signature(r, s), encode_action(action), ec.ECDSA(hashes.SHA256()))
    except InvalidSignature:
        return False
    return True
