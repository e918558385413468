from typing import Literal, Optional
from pydantic import BaseModel, Field

TicketStatus = Literal["OPEN", "IN_PROGRESS", "RESOLVED", "CLOSED"]
TicketPriority = Literal["LOW", "MEDIUM", "HIGH", "CRITICAL"]

class TicketIn(BaseModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    priority: TicketPriority
    ticketType: str = "ISSUE_REPORT"
    roomId: Optional[str] = None

class TicketPatch(BaseModel):
    status: Optional[TicketStatus] = None
    priority: Optional[TicketPriority] = None
    assignedToId: Optional[str] = None
    moderatorId: Optional[str] = None

class CommentIn(BaseModel):
    content: str = Field(min_length=1)
    isPrivate: bool = False
