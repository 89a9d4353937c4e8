from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.domain.orders.status import OrderStatus


class OrderLineInput(BaseModel):
    product_id: int = Field(gt=0)
    quantity: int = Field(ge=1)


class PlaceOrderRequest(BaseModel):
    products: list[OrderLineInput] = Field(min_length=1)


class UpdateOrderStatusRequest(BaseModel):
    status: OrderStatus

    @field_validator("status", mode="before")
    @classmethod
    def _known_status(cls, value):
        return OrderStatus.parse(value)


class OrderLineOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    order_id: int
    product_id: int
    quantity: int


class OrderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    id: int
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None = None
    user_id: int
    status: OrderStatus
    lines: list[OrderLineOut] = Field(default_factory=list)


class OrderSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_name: str
    description: str
    product_price: int
    quantity: int
    total_price: int
