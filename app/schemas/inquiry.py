from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class InquiryBody(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    phone: Optional[str] = None
    message: str = Field(..., min_length=1)

    class Config:
        json_schema_extra = {
            "example": {
                "name": "John Smith",
                "email": "john@example.com",
                "phone": "555-123-4567",
                "message": "When would be a good time to schedule a showing?"
            }
        }


class InquiryCreate(InquiryBody):
    property_id: int


class InquiryResponse(BaseModel):
    id: int
    property_id: int
    name: str
    email: str
    phone: Optional[str] = None
    message: str
    is_viewed: bool
    created_at: datetime

    class Config:
        from_attributes = True
