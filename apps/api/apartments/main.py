"""FastAPI application for the apartment registry."""
from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession

from .core.config import settings
from .core.errors import ApartmentError, apartment_error_handler
from .core.identity import CallContext, get_optional_call_context
from .core.logs import configure_logging
from .db.session import create_schema, get_session
from .routers import apartments as apartments_router
from .routers import notifications as notifications_router
from .routers import treasury as treasury_router
from .schemas.treasury import UnroutedCallResponse
from .services import treasury as treasury_service

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    configure_logging(settings.log_level)
    if settings.is_sqlite:
        # PostgreSQL deployments run scripts/bootstrap_db.py instead.
        await create_schema()
    logger.info("Apartment registry started (env=%s, payouts=%s)", settings.app_env, settings.payout_provider)
    yield


app = FastAPI(title="Apartment Registry API", version="0.1.0", lifespan=lifespan)

if settings.cors_allow_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.add_exception_handler(ApartmentError, apartment_error_handler)

app.include_router(apartments_router.router, prefix="/api/apartments", tags=["apartments"])
app.include_router(treasury_router.router, prefix="/api/treasury", tags=["treasury"])
app.include_router(notifications_router.router, prefix="/api/notifications", tags=["notifications"])


@app.get("/api/health", tags=["meta"])
async def health() -> dict[str, str]:
    """Simple liveness probe."""

    return {"status": "ok"}


@app.head("/api/health", tags=["meta"])
async def health_head() -> Response:
    """Allow HEAD for uptime monitors that only need the status code."""

    return Response(status_code=200)


@app.get("/robots.txt", response_class=PlainTextResponse, include_in_schema=False)
async def robots() -> PlainTextResponse:
    """Serve a minimal robots.txt to avoid 404 noise."""

    return PlainTextResponse("User-agent: *\nDisallow: /api/")


# Registered last so every concrete route above wins the match.
@app.api_route(
    "/api/{path:path}",
    methods=["GET", "HEAD", "OPTIONS", "POST", "PUT", "PATCH", "DELETE"],
    response_model=UnroutedCallResponse,
    status_code=status.HTTP_202_ACCEPTED,
    include_in_schema=False,
)
async def unrouted_call(
    path: str,
    request: Request,
    ctx: CallContext = Depends(get_optional_call_context),
    session: AsyncSession = Depends(get_session),
) -> UnroutedCallResponse:
    """Accept calls matching no operation without effect."""

    if settings.unrouted_calls == "reject":
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"No operation at /api/{path}")
    return await treasury_service.accept_unrouted(request.method, f"/api/{path}", ctx, session)
