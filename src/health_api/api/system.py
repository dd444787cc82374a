"""System endpoints: liveness ping and build version."""

from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel, Field

from health_api.utils.version import VersionInfo, get_version

router = APIRouter(tags=["System"])


class PingResponse(BaseModel):
    ping: str = "pong"
    server_time: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


@router.get("/ping", response_model=PingResponse)
async def ping() -> PingResponse:
    """Liveness probe; touches neither the database nor storage.

    Clients also use ``server_time`` to see the UTC instant event dates are
    normalized against.
    """
    return PingResponse()


@router.get("/version", response_model=VersionInfo)
async def version() -> VersionInfo:
    return get_version()
