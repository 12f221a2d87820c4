from __future__ import annotations

from verijack_backend.chain.in_memory import InMemoryStartLedger
from verijack_backend.engine.models import ServiceConfig
from verijack_backend.engine.service import BlackjackEngineService
from verijack_backend.repo.in_memory import InMemoryGameRepository


config = ServiceConfig.from_env()
repository = InMemoryGameRepository()
start_ledger = InMemoryStartLedger()
engine_service = BlackjackEngineService(repository, start_ledger, config)
