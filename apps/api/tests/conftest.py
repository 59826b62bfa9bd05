"""Shared fixtures: every test starts from an empty SQLite database."""
from __future__ import annotations

import os
import tempfile
from pathlib import Path

_DB_PATH = Path(tempfile.mkdtemp(prefix="apartments-tests-")) / "apartments.db"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_PATH}"
os.environ["PAYOUT_PROVIDER"] = "ledger"
os.environ["UNROUTED_CALLS"] = "accept"

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402

from apartments.core.identity import CallContext  # noqa: E402
from apartments.db.session import SessionLocal  # noqa: E402
from apartments.models import Base  # noqa: E402
from apartments.schemas import apartments as schemas  # noqa: E402
from apartments.services import registry  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_database():
    # A synchronous engine keeps schema resets independent of the test's event loop.
    engine = create_engine(f"sqlite:///{_DB_PATH}")
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    engine.dispose()
    yield


async def call(operation, *args, **kwargs):
    """Run one service operation in its own session, the way a request would."""

    async with SessionLocal() as session:
        return await operation(*args, session=session, **kwargs)


async def register(apartment_number: int, owner: str) -> schemas.ApartmentRead:
    payload = schemas.ApartmentCreateRequest(apartment_number=apartment_number)
    return await call(registry.register, payload, CallContext(caller=owner))


async def read(apartment_number: int) -> schemas.ApartmentRead:
    return await call(registry.get, apartment_number)


def assert_invariants(apartment: schemas.ApartmentRead) -> None:
    assert not (apartment.is_for_rent and apartment.is_for_sale)
    if apartment.current_tenant is not None:
        assert not apartment.is_for_rent
        assert not apartment.is_for_sale
    assert (apartment.rental_agreement is not None) == (apartment.current_tenant is not None)
