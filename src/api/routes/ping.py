"""
Ping Route

Liveness endpoint for the campaign frontend and uptime checks.
"""

from datetime import datetime, timezone
from fastapi import APIRouter
from pydantic import BaseModel

router = APIRouter()


class PingResponse(BaseModel):
    message: str
    status: str
    timestamp: str


@router.get("/ping", response_model=PingResponse)
async def ping() -> PingResponse:
    return PingResponse(
        message="pong",
        status="ok",
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
