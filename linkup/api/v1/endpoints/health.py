# linkup/api/v1/endpoints/health.py
import time

from fastapi import APIRouter

router = APIRouter()

_started_at = time.monotonic()


@router.get("")
def health():
    return {"status": "ok", "uptime": round(time.monotonic() - _started_at, 3)}
