from pydantic import BaseModel, EmailStr, Field, StrictBool
from typing import Optional

class AttendanceIn(BaseModel):
    scheduleId: str
    firstName: str = Field(min_length=1)
    lastName: str = Field(min_length=1)
    email: EmailStr
    section: str = Field(min_length=1)
    yearLevel: str = Field(min_length=1)
    subject: str = Field(min_length=1)
    description: Optional[str] = None
    # equipment present at the workstation; booleans only, "true"/1 are rejected
    systemUnit: StrictBool
    keyboard: StrictBool
    mouse: StrictBool
    internet: StrictBool
    ups: StrictBool
    createTicket: Optional[StrictBool] = None
