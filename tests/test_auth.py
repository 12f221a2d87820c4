from __future__ import annotations

import pytest
from cryptography.hazmat.primitives import serialization

from verijack_backend.engine.auth import SECP256K1_HALF_N, SECP256K1_N, verify_action_signature
from verijack_backend.engine.codec import decode_action, encode_action
from verijack_backend.engine.errors import MalformedInputError, UnknownActionKindError
from verijack_backend.engine.models import Action, ActionKind

from .test_utils import encoded_pubkey, make_signing_key, sign_action


def _action(**overrides) -> Action:
    fields = {
        "nonce": 0,
        "hand_id": 0,
        "kind": ActionKind.STAND,
        "player_cards": [8, 6],
        "dealer_cards": [10, 10],
    }
    fields.update(overrides)
    return Action(**fields)


def test_valid_signature_verifies(signing_key) -> None:
    action = _action()
    assert verify_action_signature(action, sign_action(signing_key, action), encoded_pubkey(signing_key))


def test_compressed_public_key_is_accepted(signing_key) -> None:
    action = _action()
    compressed = signing_key.public_key().public_bytes(
        serialization.Encoding.X962,
        serialization.PublicFormat.CompressedPoint,
    )
    assert verify_action_signature(action, sign_action(signing_key, action), compressed)


def test_one_bit_of_player_cards_breaks_the_signature(signing_key) -> None:
    action = _action()
    signature = sign_action(signing_key, action)
    tampered = _action(player_cards=[8 ^ 0x01, 6])

    encoded, encoded_tampered = encode_action(action), encode_action(tampered)
    assert sum(bin(a ^ b).count("1") for a, b in zip(encoded, encoded_tampered)) == 1
    assert not verify_action_signature(tampered, signature, encoded_pubkey(signing_key))


def test_signature_from_another_key_fails(signing_key) -> None:
    other = make_signing_key(0xBADD1E)
    action = _action()
    assert not verify_action_signature(action, sign_action(other, action), encoded_pubkey(signing_key))


@pytest.mark.parametrize(
    "signature",
    [
        b"",
        bytes(63),
        bytes(64),
        SECP256K1_N.to_bytes(32, "big") + (1).to_bytes(32, "big"),
        (1).to_bytes(32, "big") + (SECP256K1_HALF_N + 1).to_bytes(32, "big"),
        bytes(65),
    ],
)
def test_malformed_signatures_fail_without_raising(signing_key, signature: bytes) -> None:
    assert not verify_action_signature(_action(), signature, encoded_pubkey(signing_key))


def test_high_s_twin_of_a_valid_signature_fails(signing_key) -> None:
    action = _action()
    signature = sign_action(signing_key, action)
    s = int.from_bytes(signature[32:], "big")
    assert s <= SECP256K1_HALF_N

    twin = signature[:32] + (SECP256K1_N - s).to_bytes(32, "big")
    assert not verify_action_signature(action, twin, encoded_pubkey(signing_key))


@pytest.mark.parametrize("pubkey", [b"", b"\x04" + bytes(64), b"\x02" + bytes(31), b"not a key"])
def test_malformed_public_keys_fail_without_raising(signing_key, pubkey: bytes) -> None:
    action = _action()
    assert not verify_action_signature(action, sign_action(signing_key, action), pubkey)


def test_canonical_layout_is_abi_tuple() -> None:
    encoded = encode_action(_action(nonce=3, hand_id=1, kind=ActionKind.SPLIT, player_cards=[5, 5], dealer_cards=[9]))
    words = [encoded[i:i + 32] for i in range(0, len(encoded), 32)]

    assert int.from_bytes(words[0], "big") == 32
    assert [int.from_bytes(word, "big") for word in words[1:4]] == [3, 1, 3]
    assert decode_action(encoded) == _action(
        nonce=3,
        hand_id=1,
        kind=ActionKind.SPLIT,
        player_cards=[5, 5],
        dealer_cards=[9],
    )


def test_action_kind_codes_are_total_over_valid_range() -> None:
    assert [ActionKind.from_code(code) for code in range(4)] == [
        ActionKind.HIT,
        ActionKind.STAND,
        ActionKind.DOUBLE,
        ActionKind.SPLIT,
    ]
    with pytest.raises(UnknownActionKindError):
        ActionKind.from_code(4)


def test_out_of_range_kind_in_wire_action_is_fatal() -> None:
    encoded = bytearray(encode_action(_action()))
    encoded[32 * 3 + 31] = 9
    with pytest.raises(UnknownActionKindError):
        decode_action(bytes(encoded))


def test_truncated_action_bytes_are_malformed() -> None:
    with pytest.raises(MalformedInputError):
        decode_action(encode_action(_action())[:40])
