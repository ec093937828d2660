from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from storefront.config.constants import MAX_RATING, MIN_RATING


class ReviewerSchema(BaseModel):
    id: str
    name: Optional[str] = None
    photo: Optional[str] = None


class ReviewSchema(BaseModel):
    id: int
    product_id: int
    rating: int
    comment: Optional[str] = None
    user: ReviewerSchema
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class CreateReviewSchema(BaseModel):
    rating: int = Field(..., ge=MIN_RATING, le=MAX_RATING, examples=[4])
    comment: Optional[str] = Field(None, max_length=2000, examples=["Great sound"])
