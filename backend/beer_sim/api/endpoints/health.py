from datetime import datetime, timezone
from typing import Dict

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text
from sqlalchemy.orm import Session

from beer_sim.db.session import get_db

router = APIRouter()


@router.get("/health", response_model=Dict[str, str])
def health_check(db: Session = Depends(get_db)) -> Dict[str, str]:
    """
    Health check endpoint that verifies database connectivity.
    """
    try:
        db.execute(text("SELECT 1")).scalar()
    except Exception as e:
        raise HTTPException(
            status_code=503,
            detail={"status": "unhealthy", "error": str(e)},
        )
    return {
        "status": "healthy",
        "database": "connected",
        "time": datetime.now(timezone.utc).isoformat(),
    }
