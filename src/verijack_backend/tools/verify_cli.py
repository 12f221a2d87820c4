from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from verijack_backend.engine.models import BatchInput, BlackjackPayout, InvalidGamePolicy, RulesConfig
from verijack_backend.engine.verifier import verify_encoded_batch, verify_input


def _run(path: Path, abi: bool, config: RulesConfig) -> None:
    if abi:
        raw = path.read_text().strip()
        data = bytes.fromhex(raw.removeprefix("0x"))
        print("0x" + verify_encoded_batch(data, config).hex())
        return
    batch = BatchInput.model_validate(json.loads(path.read_text()))
    result = verify_input(batch, config)
    print(json.dumps(result.model_dump(mode="json"), indent=2))


def main() -> None:
    parser = argparse.ArgumentParser(description="Replay and verify a batch of completed games")
    parser.add_argument("batch_file", type=Path)
    parser.add_argument("--abi", action="store_true", help="input is hex ABI, print the ABI journal")
    parser.add_argument(
        "--blackjack-payout",
        choices=[option.value for option in BlackjackPayout],
        default=BlackjackPayout.FIVE_HALVES.value,
    )
    parser.add_argument(
        "--invalid-game-policy",
        choices=[option.value for option in InvalidGamePolicy],
        default=InvalidGamePolicy.ISOLATE.value,
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)
    config = RulesConfig(
        blackjack_payout=args.blackjack_payout,
        invalid_game_policy=args.invalid_game_policy,
    )
    _run(args.batch_file, args.abi, config)


if __name__ == "__main__":
    main()
