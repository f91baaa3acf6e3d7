# clinic/routes/inventory/schemas.py

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from clinic.models.all_models import TransactionType
from clinic.services.inventory import MAX_STOCK


def _blank_to_none(v):
    if isinstance(v, str) and not v.strip():
        return None
    return v

# Categories
class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None

class CategoryResponse(BaseModel):
    id: UUID
    name: str
    description: Optional[str] = None

    class Config:
        from_attributes = True

# Items
class ItemCreate(BaseModel):
    category_id: UUID
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    unit_of_measure: str = Field("kom", max_length=20)
    current_stock: int = Field(0, ge=0, le=MAX_STOCK)
    min_stock_level: int = Field(10, ge=0, le=MAX_STOCK)
    unit_price: Optional[Decimal] = Field(None, ge=0)
    supplier: Optional[str] = Field(None, max_length=200)
    expiry_date: Optional[date] = None

    @field_validator('description', 'supplier', 'unit_price', 'expiry_date', mode='before')
    @classmethod
    def blank_to_none(cls, v):
        return _blank_to_none(v)

class ItemResponse(BaseModel):
    id: UUID
    category_id: UUID
    name: str
    description: Optional[str] = None
    unit_of_measure: str
    current_stock: int
    min_stock_level: int
    unit_price: Optional[Decimal] = None
    supplier: Optional[str] = None
    expiry_date: Optional[date] = None
    stock_status: Optional[str] = None
    created_at: Optional[datetime] = None
    category: Optional[CategoryResponse] = None

    class Config:
        from_attributes = True

# Transactions
class TransactionCreate(BaseModel):
    transaction_type: TransactionType
    quantity: int = Field(..., ge=0, le=MAX_STOCK)
    reason: Optional[str] = None

    @field_validator('reason', mode='before')
    @classmethod
    def blank_to_none(cls, v):
        return _blank_to_none(v)

class TransactionResponse(BaseModel):
    id: UUID
    item_id: UUID
    transaction_type: TransactionType
    quantity: int
    reason: Optional[str] = None
    performed_by: UUID
    created_at: Optional[datetime] = None
    item_name: Optional[str] = None
    performed_by_name: Optional[str] = None

class TransactionResult(BaseModel):
    message: str
    item: ItemResponse
    transaction: TransactionResponse

class InventoryOverview(BaseModel):
    items: List[ItemResponse]
    categories: List[CategoryResponse]
    transactions: List[TransactionResponse]
    low_stock: List[ItemResponse]
    expiring_soon: List[ItemResponse]
    search: Optional[str] = None
