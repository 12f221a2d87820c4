from __future__ import annotations

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from verijack_backend.api.deps import engine_service
from verijack_backend.engine.errors import EngineRejectedAction
from verijack_backend.engine.models import (
    BatchInput,
    BatchOutput,
    EngineError,
    GameInput,
    GameView,
    StartGameRequest,
    StartGameResponse,
    SubmitActionRequest,
    SubmitActionResponse,
)
from verijack_backend.engine.verifier import verify_input


router = APIRouter(prefix="/api")

_STATUS_BY_CODE = {
    "GAME_NOT_FOUND": 404,
    "UNKNOWN_TX": 404,
    "GAME_EXISTS": 409,
    "GAME_NOT_TERMINATED": 409,
}


class VerifyRequest(BaseModel):
    batch: BatchInput


def _http_error(exc: EngineRejectedAction) -> HTTPException:
    return HTTPException(
        status_code=_STATUS_BY_CODE.get(exc.code, 400),
        detail={"code": exc.code, "message": exc.message},
    )


@router.post("/games/start", response_model=StartGameResponse)
async def start_game(request: StartGameRequest) -> StartGameResponse:
    try:
        return await engine_service.start_game(request.tx_hash, request.player_seed)
    except EngineRejectedAction as exc:
        raise _http_error(exc) from exc


@router.post("/games/{game_index}/actions", response_model=SubmitActionResponse)
async def submit_action(game_index: int, request: SubmitActionRequest) -> SubmitActionResponse:
    try:
        return await engine_service.submit_action(game_index, request.action, request.signature)
    except EngineRejectedAction as exc:
        if exc.code == "GAME_NOT_FOUND":
            raise _http_error(exc) from exc
        view = await engine_service.get_view(game_index)
        return SubmitActionResponse(
            accepted=False,
            error=EngineError(code=exc.code, message=exc.message),
            player_hands=view.player_hands,
            dealer_hand=view.dealer_hand,
            hands_active=view.hands_active,
        )


@router.get("/games/{game_index}", response_model=GameView)
async def get_game(game_index: int) -> GameView:
    try:
        return await engine_service.get_view(game_index)
    except EngineRejectedAction as exc:
        raise _http_error(exc) from exc


@router.get("/games/{game_index}/input", response_model=GameInput)
async def export_game_input(game_index: int) -> GameInput:
    try:
        return await engine_service.extract_game_input(game_index)
    except EngineRejectedAction as exc:
        raise _http_error(exc) from exc


@router.post("/verify", response_model=BatchOutput)
def verify(request: VerifyRequest) -> BatchOutput:
    # plain def: the replay is CPU bound and runs in the threadpool
    return verify_input(request.batch, engine_service.config.rules)
