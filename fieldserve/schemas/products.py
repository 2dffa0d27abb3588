from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .common import PatchModel, empty_to_none


def _clean_sku(v):
    if v is None:
        return v
    v = str(v).strip()
    if not v:
        raise ValueError("must not be empty")
    return v


class ProductBase(BaseModel):
    name: str
    sku: str
    description: Optional[str] = None
    unit_price: float = Field(ge=0)
    stock_quantity: int = Field(default=0, ge=0)
    low_stock_threshold: int = Field(default=5, ge=0)
    category: Optional[str] = None

    @field_validator("sku", mode="before")
    @classmethod
    def normalize_sku(cls, v):
        return _clean_sku(v)

    @field_validator("description", "category", mode="before")
    @classmethod
    def empty_to_none(cls, v):
        return empty_to_none(v)


class ProductCreate(ProductBase):
    pass


class ProductUpdate(PatchModel):
    NULLABLE = frozenset({"description", "category"})

    name: Optional[str] = None
    sku: Optional[str] = None
    description: Optional[str] = None
    unit_price: Optional[float] = Field(default=None, ge=0)
    stock_quantity: Optional[int] = Field(default=None, ge=0)
    low_stock_threshold: Optional[int] = Field(default=None, ge=0)
    category: Optional[str] = None

    @field_validator("sku", mode="before")
    @classmethod
    def normalize_sku(cls, v):
        return _clean_sku(v)

    @field_validator("description", "category", mode="before")
    @classmethod
    def empty_to_none(cls, v):
        return empty_to_none(v)


class ProductResponse(ProductBase):
    id: int
    created_at: datetime
    updated_at: datetime


class ProductUsageCreate(BaseModel):
    task_id: int
    product_id: int
    quantity: int = Field(gt=0)


class ProductUsageUpdate(PatchModel):
    task_id: Optional[int] = None
    product_id: Optional[int] = None
    quantity: Optional[int] = Field(default=None, gt=0)


class ProductUsageResponse(BaseModel):
    id: int
    task_id: int
    product_id: int
    quantity: int
    used_at: datetime
    product: Optional[ProductResponse] = None
