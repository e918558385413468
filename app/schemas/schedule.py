from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field

DayOfWeek = Literal["monday", "tuesday", "wednesday", "thursday", "friday", "saturday"]

class UserScheduleIn(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    startTime: datetime
    endTime: datetime
    dayOfWeek: DayOfWeek
    roomId: str

class ScheduleIn(UserScheduleIn):
    userId: str

class SchedulePatch(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    startTime: Optional[datetime] = None
    endTime: Optional[datetime] = None
    dayOfWeek: Optional[DayOfWeek] = None
    userId: Optional[str] = None
    roomId: Optional[str] = None
