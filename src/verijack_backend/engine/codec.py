"""Solidity ABI layouts shared by the service, the verifier and on-chain consumers.

The action layout is the canonical encoding: it is what the player signs and
what the verifier hashes for the audit trail of an invalid game.
"""

from __future__ import annotations

from collections.abc import Sequence

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError, EncodingError

from verijack_backend.engine.errors import MalformedInputError
from verijack_backend.engine.models import (
    SIGNATURE_BYTES,
    Action,
    ActionKind,
    BatchInput,
    BatchOutput,
    GameInput,
)


ACTION_TYPE = "(uint8,uint8,uint8,uint8[],uint8[])"
GAME_INPUT_TYPE = f"(bytes16,bytes,uint8,uint256[],{ACTION_TYPE}[],bytes32[2][])"
BATCH_INPUT_TYPE = f"(bytes16,{GAME_INPUT_TYPE}[])"
BATCH_OUTPUT_TYPE = "(bytes32,bytes32[],bytes[],uint256[],uint8[][],uint8[][],bytes32[],bool[])"


def _action_tuple(action: Action) -> tuple:
    return (
        action.nonce,
        action.hand_id,
        action.kind.code,
        list(action.player_cards),
        list(action.dealer_cards),
    )


def encode_action(action: Action) -> bytes:
    return encode([ACTION_TYPE], [_action_tuple(action)])


def encode_action_log(actions: Sequence[Action]) -> bytes:
    return encode([f"{ACTION_TYPE}[]"], [[_action_tuple(action) for action in actions]])


def _action_from_tuple(row: Sequence) -> Action:
    nonce, hand_id, kind, player_cards, dealer_cards = row
    return Action(
        nonce=nonce,
        hand_id=hand_id,
        kind=ActionKind.from_code(kind),
        player_cards=list(player_cards),
        dealer_cards=list(dealer_cards),
    )


def decode_action(data: bytes) -> Action:
    try:
        (row,) = decode([ACTION_TYPE], data)
    except (DecodingError, ValueError, TypeError) as exc:
        raise MalformedInputError(f"undecodable action: {exc}") from exc
    return _action_from_tuple(row)


def _split_signature(signature: bytes) -> list[bytes]:
    if len(signature) != SIGNATURE_BYTES:
        raise MalformedInputError(f"signature must be {SIGNATURE_BYTES} bytes, got {len(signature)}")
    return [signature[:32], signature[32:]]


def _game_tuple(game: GameInput) -> tuple:
    return (
        game.player_seed,
        game.pubkey,
        game.initial_hands,
        list(game.bets),
        [_action_tuple(action) for action in game.actions],
        [_split_signature(signature) for signature in game.signatures],
    )


def encode_batch_input(batch: BatchInput) -> bytes:
    try:
        return encode([BATCH_INPUT_TYPE], [(batch.dealer_seed, [_game_tuple(game) for game in batch.games])])
    except EncodingError as exc:
        raise MalformedInputError(f"unencodable batch input: {exc}") from exc


def decode_batch_input(data: bytes) -> BatchInput:
    try:
        ((dealer_seed, games),) = decode([BATCH_INPUT_TYPE], data)
    except (DecodingError, ValueError, TypeError) as exc:
        raise MalformedInputError(f"undecodable batch input: {exc}") from exc

    return BatchInput(
        dealer_seed=dealer_seed,
        games=[
            GameInput(
                player_seed=player_seed,
                pubkey=pubkey,
                initial_hands=initial_hands,
                bets=list(bets),
                actions=[_action_from_tuple(row) for row in actions],
                signatures=[b"".join(halves) for halves in signatures],
            )
            for player_seed, pubkey, initial_hands, bets, actions, signatures in games
        ],
    )


def encode_batch_output(output: BatchOutput) -> bytes:
    verdicts = output.games
    return encode(
        [BATCH_OUTPUT_TYPE],
        [
            (
                output.dealer_commitment,
                [verdict.player_commitment for verdict in verdicts],
                [verdict.player_pubkey for verdict in verdicts],
                [verdict.payout for verdict in verdicts],
                [list(verdict.doubled_hands) for verdict in verdicts],
                [list(verdict.split_hands) for verdict in verdicts],
                [verdict.action_log_hash for verdict in verdicts],
                [verdict.terminated for verdict in verdicts],
            ),
        ],
    )
