"""Caller identity and attached payment supplied by the calling substrate."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated

from fastapi import Header, HTTPException, status

# Largest integer JSON clients decode exactly; every stored amount and balance stays within it.
MAX_AMOUNT = 2**53 - 1


@dataclass(frozen=True, slots=True)
class CallContext:
    """Who is calling and how much value is attached to the call."""

    caller: str
    amount: int = 0


async def get_call_context(
    x_caller_id: Annotated[str | None, Header()] = None,
    x_payment_amount: Annotated[int, Header(ge=0, le=MAX_AMOUNT)] = 0,
) -> CallContext:
    """FastAPI dependency building the context from request headers."""

    caller = (x_caller_id or "").strip()
    if not caller:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="X-Caller-Id header is required")
    return CallContext(caller=caller, amount=x_payment_amount)


async def get_optional_call_context(
    x_caller_id: Annotated[str | None, Header()] = None,
    x_payment_amount: Annotated[int, Header(ge=0, le=MAX_AMOUNT)] = 0,
) -> CallContext:
    """Like ``get_call_context`` but tolerates anonymous callers."""

    caller = (x_caller_id or "").strip() or "anonymous"
    return CallContext(caller=caller, amount=x_payment_amount)
