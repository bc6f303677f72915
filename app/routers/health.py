# app/routers/health.py
"""
System health check endpoint.
Returns status of backend + local cache DB + shared document reachability.
"""

import requests
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import text
from app.database import get_db
from app.dependencies import get_engine
from app.services.sync_engine import SyncEngine
from datetime import datetime, timezone

router = APIRouter()


@router.get("/health", summary="System health check")
def health_check(db: Session = Depends(get_db), engine: SyncEngine = Depends(get_engine)):
    """
    Returns:
    - Backend status
    - Local cache connectivity
    - Shared document reachability (direct GET, bypassing the sync engine)
    - Last sync outcome
    """
    result = {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "backend": "ok",
        "cache": "unknown",
        "remote": "unknown",
        "network_id": engine.network_id,
        "last_synced": engine.last_synced.isoformat() if engine.last_synced else None,
        "sync_error": engine.error,
    }

    try:
        db.execute(text("SELECT 1"))
        result["cache"] = "ok"
    except Exception as e:
        result["cache"] = f"error: {str(e)}"
        result["status"] = "degraded"

    try:
        resp = requests.get(
            engine.remote.url,
            headers={"Cache-Control": "no-cache"},
            timeout=3,
        )
        result["remote"] = "ok" if resp.status_code == 200 else f"http_{resp.status_code}"
    except requests.exceptions.ConnectionError:
        result["remote"] = "unreachable"
        result["status"] = "degraded"
    except Exception as e:
        result["remote"] = f"error: {str(e)}"

    return result
