from __future__ import annotations

import pytest
from cryptography.hazmat.primitives.asymmetric import ec

from verijack_backend.chain.in_memory import InMemoryStartLedger
from verijack_backend.engine.service import BlackjackEngineService

from .test_utils import make_engine, make_signing_key


@pytest.fixture
def signing_key() -> ec.EllipticCurvePrivateKey:
    return make_signing_key()


@pytest.fixture
def engine_and_ledger() -> tuple[BlackjackEngineService, InMemoryStartLedger]:
    return make_engine()


@pytest.fixture
def engine(engine_and_ledger) -> BlackjackEngineService:
    return engine_and_ledger[0]


@pytest.fixture
def ledger(engine_and_ledger) -> InMemoryStartLedger:
    return engine_and_ledger[1]
