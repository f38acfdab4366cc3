from datetime import UTC, datetime

from fastapi import APIRouter

from fontpack.schemas.fonts import ReadinessRead

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/ready", response_model=ReadinessRead)
def readiness() -> ReadinessRead:
    return ReadinessRead(status="ready", timestamp=datetime.now(UTC).isoformat())
