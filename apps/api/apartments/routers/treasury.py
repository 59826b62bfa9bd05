"""System balance endpoint."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.session import get_session
from ..schemas import treasury as schemas
from ..services import treasury as treasury_service

router = APIRouter()


@router.get("", response_model=schemas.TreasuryResponse)
async def get_treasury(session: AsyncSession = Depends(get_session)) -> schemas.TreasuryResponse:
    """Return payments accepted, paid out and retained by the system."""

    return await treasury_service.get_totals(session)
