# routers/health.py
from fastapi import APIRouter, Depends

from services.duel_engine import DuelEngine, get_duel_engine

router = APIRouter()


@router.get("/health", summary="Health check")
async def healthcheck(engine: DuelEngine = Depends(get_duel_engine)):
    return {"status": "ok", "live_duels": engine.live_count()}
