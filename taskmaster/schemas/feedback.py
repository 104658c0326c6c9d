from pydantic import BaseModel, ConfigDict, EmailStr, Field
from datetime import datetime
from typing import Optional


class FeedbackCreate(BaseModel):
    user_id: Optional[str] = None
    rating: int = Field(..., ge=1, le=5)
    message: Optional[str] = None


class FeedbackResponse(BaseModel):
    id: int
    user_id: Optional[str]
    rating: int
    message: Optional[str]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ContactCreate(BaseModel):
    user_id: Optional[str] = None
    user_email: EmailStr
    subject: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)


class ContactResponse(BaseModel):
    id: int
    user_id: Optional[str]
    user_email: str
    subject: str
    message: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
