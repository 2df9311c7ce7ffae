from fastapi import APIRouter, Depends
from pydantic import BaseModel, StrictBool
from typing import Optional

from dependencies import get_coordinator, get_edit_lock, http_error
from exceptions import HabitTrackerError
from services.day_log import parse_day
from services.edit_coordinator import EditCoordinator

router = APIRouter(prefix="/api/v1/days", tags=["Days"])

class CompletionEdit(BaseModel):
    completion: list[Optional[StrictBool]]

def with_warnings(record, coordinator: EditCoordinator) -> dict:
    return {**record.to_dict(), "warnings": [w.to_dict() for w in coordinator.warnings]}

@router.get("")
async def list_days(start: Optional[str] = None, end: Optional[str] = None,
                    coordinator: EditCoordinator = Depends(get_coordinator)):
    try:
        first = coordinator.day_log.get_first_record()
        last = coordinator.day_log.get_last_record()
        if first is None:
            return []
        start_day = parse_day(start) if start else first.date
        end_day = parse_day(end) if end else last.date
        return [r.to_dict() for r in coordinator.day_log.records_between(start_day, end_day)]
    except HabitTrackerError as e:
        raise http_error(e)

@router.get("/today")
async def get_today(coordinator: EditCoordinator = Depends(get_coordinator), lock=Depends(get_edit_lock)):
    try:
        with lock:
            record = coordinator.ensure_date_visible(coordinator.clock.today())
        return with_warnings(record, coordinator)
    except HabitTrackerError as e:
        raise http_error(e)

@router.post("/recompute")
async def recompute_days(coordinator: EditCoordinator = Depends(get_coordinator), lock=Depends(get_edit_lock)):
    try:
        with lock:
            result = coordinator.recompute_all()
        return {"status": "success", "data": result.to_dict()}
    except HabitTrackerError as e:
        raise http_error(e)

@router.get("/{day}")
async def get_day(day: str, coordinator: EditCoordinator = Depends(get_coordinator)):
    try:
        return coordinator.get_record_for_date(day).to_dict()
    except HabitTrackerError as e:
        raise http_error(e)

@router.post("/{day}/ensure")
async def ensure_day(day: str, coordinator: EditCoordinator = Depends(get_coordinator), lock=Depends(get_edit_lock)):
    try:
        with lock:
            record = coordinator.ensure_date_visible(day)
        return with_warnings(record, coordinator)
    except HabitTrackerError as e:
        raise http_error(e)

@router.put("/{day}/completion")
async def edit_completion(day: str, edit: CompletionEdit,
                          coordinator: EditCoordinator = Depends(get_coordinator), lock=Depends(get_edit_lock)):
    try:
        with lock:
            record = coordinator.record_completion_edit(day, edit.completion)
        return {
            "status": "success",
            "data": record.to_dict(),
            "propagated": coordinator.last_result.updated,
            "warnings": [w.to_dict() for w in coordinator.warnings],
        }
    except HabitTrackerError as e:
        raise http_error(e)
