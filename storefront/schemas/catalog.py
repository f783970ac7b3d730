"""Catalog Schemas — products, customers and the stock patch body.

Invariants:
    - ProductCreate: name 1-200 chars (stripped), price >= 0 with 2 decimals,
      0 <= stock <= MAX_QUANTITY
    - CustomerCreate: name required and non-blank, phone optional
    - StockUpdate is bounded above only; the sign check raises InvalidRequestError in the route
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from storefront.core.domain_types import MAX_QUANTITY
from storefront.schemas.fields import Quantity


def _strip_required(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("name cannot be empty or whitespace")
    return v


class ProductCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    price: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    stock: int = Field(ge=0, le=MAX_QUANTITY)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return _strip_required(v)


class ProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    price: Decimal
    stock: int
    created_at: datetime


class StockUpdate(BaseModel):
    stock: Quantity


class CustomerCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    phone: str = Field("", max_length=50)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return _strip_required(v)


class CustomerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    phone: str
    created_at: datetime
