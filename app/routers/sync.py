# app/routers/sync.py
from fastapi import APIRouter, Depends

from app.dependencies import get_engine
from app.schemas.partition import SyncStatusOut
from app.services.sync_engine import SyncEngine

router = APIRouter()


@router.get("/sync/status", response_model=SyncStatusOut, summary="Sync indicator (last pull outcome)")
def sync_status(engine: SyncEngine = Depends(get_engine)):
    return engine.status()


@router.post("/sync", response_model=SyncStatusOut, summary="Pull the shared document now")
async def sync_now(engine: SyncEngine = Depends(get_engine)):
    """Manual refresh. Failures are reported in `error`, never as a 5xx."""
    await engine.sync()
    return engine.status()
