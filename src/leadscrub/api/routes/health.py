"""Health check endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request
from fastapi.concurrency import run_in_threadpool

from leadscrub.core.exceptions import StoreUnavailableError

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "healthy"}


@router.get("/ready")
async def ready(request: Request) -> dict[str, str]:
    try:
        await run_in_threadpool(request.app.state.store.ping)
    except StoreUnavailableError as exc:
        raise HTTPException(status_code=503, detail="suppression store unreachable") from exc
    return {"status": "ready"}
