from datetime import datetime, timezone

from fastapi import APIRouter, Request, Response

from mealdose import __version__

router = APIRouter()

_start_time = datetime.now(timezone.utc)


def _uptime_seconds() -> float:
    return (datetime.now(timezone.utc) - _start_time).total_seconds()


@router.api_route("/", methods=["GET", "HEAD"], summary="Liveness probe", response_model=None)
async def health(request: Request):
    if request.method == "HEAD":
        return Response(status_code=200)
    return {"ok": True}


@router.get("/full", summary="Full health check")
async def full_health() -> dict:
    return {
        "ok": True,
        "uptime_seconds": _uptime_seconds(),
        "version": __version__,
    }
