from fastapi import APIRouter, HTTPException, Depends
import logging
from sqlalchemy.orm import Session
from helpradar.database import get_db
from helpradar.services.stats_service import get_post_stats

logger = logging.getLogger(__name__)
router = APIRouter()

@router.get("")
async def get_stats(db: Session = Depends(get_db)):
    """Aggregated statistics over active posts"""
    try:
        return get_post_stats(db)
    except Exception as e:
        logger.error(f"Error computing stats: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch statistics")
