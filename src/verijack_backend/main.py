from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from verijack_backend.api.routes import router
from verijack_backend.engine.errors import FatalEngineError, MalformedInputError
from verijack_backend.engine.models import ENGINE_VERSION


logger = logging.getLogger(__name__)

app = FastAPI(title="Verijack Backend", version=ENGINE_VERSION)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


@app.exception_handler(FatalEngineError)
async def fatal_engine_error(request: Request, exc: FatalEngineError) -> JSONResponse:
    if isinstance(exc, MalformedInputError):
        return JSONResponse(status_code=400, content={"code": "MALFORMED_INPUT", "message": str(exc)})
    logger.error("aborting %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"code": "FATAL_ENGINE_ERROR", "message": str(exc)})


@app.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}
