from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from storefront.config.constants import Gender, UserRole


class DecodedToken(BaseModel):
    """The parts of a verified Firebase ID token the API relies on"""

    uid: str
    role: Optional[UserRole] = None
    email: Optional[str] = None
    name: Optional[str] = None
    picture: Optional[str] = None


class UserSchema(BaseModel):
    id: str
    name: str
    email: str
    photo: str
    gender: Gender
    role: UserRole
    dob: date
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class CreateUserSchema(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, examples=["Jane Doe"])
    email: EmailStr = Field(..., examples=["jane@example.com"])
    photo: str = Field(..., min_length=1, examples=["https://example.com/jane.png"])
    gender: Gender = Field(..., examples=["female"])
    dob: date = Field(..., examples=["1995-04-12"])
