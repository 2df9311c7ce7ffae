from fastapi import APIRouter, Depends
from pydantic import BaseModel
from typing import Optional

from dependencies import get_edit_lock, get_setup, http_error
from exceptions import HabitTrackerError
from services.challenge_setup import ChallengeSetup

router = APIRouter(prefix="/api/v1/challenge", tags=["Challenge"])

class ChallengeCreate(BaseModel):
    habits: list[str]
    first_challenge_date: Optional[str] = None
    boost_interval_days: Optional[int] = None
    default_buffer_per_habit: Optional[int] = None

@router.get("")
async def get_challenge(setup: ChallengeSetup = Depends(get_setup)):
    try:
        return setup.current().to_dict()
    except HabitTrackerError as e:
        raise http_error(e)

@router.post("")
async def start_challenge(data: ChallengeCreate, setup: ChallengeSetup = Depends(get_setup),
                          lock=Depends(get_edit_lock)):
    try:
        with lock:
            config = setup.start(
                data.habits,
                first_challenge_date=data.first_challenge_date,
                boost_interval_days=data.boost_interval_days,
                default_buffer_per_habit=data.default_buffer_per_habit,
            )
        return {"status": "success", "data": config.to_dict()}
    except HabitTrackerError as e:
        raise http_error(e)
