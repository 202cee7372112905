"""
프로필 요청/응답 스키마.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class ProfileResponse(BaseModel):
    id: str
    name: Optional[str] = None
    avatar_url: Optional[str] = None
    email: Optional[str] = Field(None, description="인증 토큰의 이메일 (저장하지 않음)")
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=100)
    avatar_url: Optional[str] = Field(None, max_length=1024)

    model_config = {"extra": "forbid"}

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: Optional[str]) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("Name is required")
        return v
