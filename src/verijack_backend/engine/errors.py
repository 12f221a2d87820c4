from __future__ import annotations


class EngineRejectedAction(Exception):
    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


class FatalEngineError(Exception):
    """Contract violation the rules engine cannot route around.

    Raised errors abort the whole enclosing operation: the batch being verified
    or the request being served.
    """


class MalformedInputError(FatalEngineError):
    pass


class PayoutOverflowError(FatalEngineError):
    pass


class UnknownActionKindError(FatalEngineError):
    def __init__(self, code: int) -> None:
        super().__init__(f"action kind {code} has no mapped variant")
        self.code = code


class BatchAbortedError(FatalEngineError):
    def __init__(self, game_position: int, reason: str) -> None:
        super().__init__(f"game {game_position} failed replay: {reason}")
        self.game_position = game_position
        self.reason = reason
