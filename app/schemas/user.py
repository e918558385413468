from typing import List, Literal, Optional
from pydantic import BaseModel, EmailStr, Field, HttpUrl

RoleName = Literal["admin", "manager", "member", "guest", "technician", "moderator", "user"]

class UserIn(BaseModel):
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    username: Optional[str] = Field(default=None, min_length=3)
    email: Optional[EmailStr] = None
    role: RoleName = "member"
    externalId: Optional[str] = None

class UserPatch(BaseModel):
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    username: Optional[str] = Field(default=None, min_length=3)
    email: Optional[EmailStr] = None
    role: Optional[RoleName] = None
    profileImageUrl: Optional[HttpUrl] = None

class UserPermissionsIn(BaseModel):
    permissions: List[str]

class BulkRoleIn(BaseModel):
    userIds: List[str]
    role: RoleName

class BulkDeleteIn(BaseModel):
    userIds: List[str] = Field(min_length=1)
