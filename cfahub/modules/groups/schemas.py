from pydantic import BaseModel, field_validator
from typing import Optional
from datetime import datetime


class GroupCreate(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Group name must not be empty")
        return value.strip()


class GroupJoin(BaseModel):
    invite_code: str

    @field_validator("invite_code")
    @classmethod
    def code_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Invite code must not be empty")
        return value.strip()


class ActiveGroupUpdate(BaseModel):
    group_id: Optional[str] = None


class GroupResponse(BaseModel):
    id: str
    name: str
    invite_code: Optional[str] = None
    created_at: Optional[datetime] = None
    is_active: bool = False

    class Config:
        from_attributes = True


class ActiveGroupResponse(BaseModel):
    active_group_id: Optional[str] = None


class MemberResponse(BaseModel):
    id: str
    username: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None

    class Config:
        from_attributes = True
