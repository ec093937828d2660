from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from storefront.config.constants import OrderStatus


class ShippingInfoSchema(BaseModel):
    address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    country: str = Field(..., min_length=1)
    pin_code: int = Field(..., gt=0)


class OrderItemSchema(BaseModel):
    product_id: int
    name: str
    photo: Optional[str] = None
    price: float
    quantity: int


class CreateOrderItemSchema(BaseModel):
    product_id: int
    quantity: int = Field(..., gt=0)


class CreateOrderSchema(BaseModel):
    shipping_info: ShippingInfoSchema
    subtotal: float = Field(..., ge=0)
    tax: float = Field(..., ge=0)
    shipping_charges: float = Field(0, ge=0)
    discount: float = Field(0, ge=0)
    total: float = Field(..., ge=0)
    order_items: List[CreateOrderItemSchema] = Field(..., min_length=1)


class OrderSchema(BaseModel):
    id: int
    user_id: str
    shipping_info: ShippingInfoSchema
    subtotal: float
    tax: float
    shipping_charges: float
    discount: float
    total: float
    status: OrderStatus
    order_items: List[OrderItemSchema]
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
