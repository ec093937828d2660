from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from storefront.config.constants import (
    MAX_PRODUCT_PHOTOS,
    MIN_PRODUCT_PHOTOS,
    SortDirection,
)


class PhotoSchema(BaseModel):
    """An image already uploaded to the object store"""

    url: str = Field(..., min_length=1)
    public_id: str = Field(..., min_length=1)


class ProductSchema(BaseModel):
    id: int
    name: str
    description: str
    price: float
    stock: int
    category: str
    photos: List[PhotoSchema] = []
    ratings: int = 0
    num_of_reviews: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class CreateProductSchema(BaseModel):
    name: str = Field(..., min_length=1, examples=["Noise-cancelling headphones"])
    description: str = Field(..., min_length=1)
    price: float = Field(..., gt=0)
    stock: int = Field(..., gt=0)
    category: str = Field(..., min_length=1, examples=["audio"])
    photos: List[PhotoSchema] = Field(
        ..., min_length=MIN_PRODUCT_PHOTOS, max_length=MAX_PRODUCT_PHOTOS
    )


class UpdateProductSchema(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = Field(None, min_length=1)
    price: Optional[float] = Field(None, gt=0)
    stock: Optional[int] = Field(None, ge=0)
    category: Optional[str] = Field(None, min_length=1)
    photos: Optional[List[PhotoSchema]] = Field(
        None, min_length=MIN_PRODUCT_PHOTOS, max_length=MAX_PRODUCT_PHOTOS
    )


class ListingFilter(BaseModel):
    """Search criteria of one listing page; also the identity of its cache key"""

    search: Optional[str] = None
    sort: Optional[SortDirection] = None
    category: Optional[str] = None
    max_price: Optional[float] = Field(None, ge=0)
    page: int = Field(1, ge=1)

    model_config = ConfigDict(frozen=True)

    @field_validator("search", "category", mode="before")
    @classmethod
    def blank_is_absent(cls, value):
        if isinstance(value, str) and value == "":
            return None
        return value
