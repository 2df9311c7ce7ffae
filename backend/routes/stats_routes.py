from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from dependencies import get_coordinator, get_edit_lock, http_error
from exceptions import HabitTrackerError
from services.edit_coordinator import EditCoordinator
from services.stats_service import StatsService

router = APIRouter(prefix="/api/v1/stats", tags=["Stats"])

@router.get("/summary")
async def stats_summary(db: Session = Depends(get_db), coordinator: EditCoordinator = Depends(get_coordinator),
                        lock=Depends(get_edit_lock)):
    try:
        # summary materializes today's record
        with lock:
            return StatsService(db, coordinator).summary()
    except HabitTrackerError as e:
        raise http_error(e)
