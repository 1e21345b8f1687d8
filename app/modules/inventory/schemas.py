# app/modules/inventory/schemas.py
from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from decimal import Decimal
from datetime import datetime
from app.shared.schemas.common import BaseResponse

class InventoryItemCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="Nombre del item")
    sku: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = Field(None, max_length=500)
    category: str = Field("Other", min_length=1, max_length=100)
    quantity: int = Field(..., ge=0, description="Cantidad disponible")
    unit: str = Field("piece", max_length=20)
    price: Decimal = Field(..., ge=0, description="Precio unitario")
    cost: Decimal = Field(Decimal("0"), ge=0)
    supplier: Optional[str] = Field(None, max_length=100)
    reorder_level: int = Field(0, ge=0, description="Nivel mínimo antes de reordenar")

    @field_validator('name', 'category')
    @classmethod
    def strip_text(cls, v):
        if not v.strip():
            raise ValueError('El campo no puede estar vacío')
        return v.strip()

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Teclado mecánico",
                "sku": "KB-001",
                "category": "Electronics",
                "quantity": 25,
                "price": 49.90,
                "reorder_level": 5
            }
        }

class InventoryItemUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    sku: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = Field(None, max_length=500)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    quantity: Optional[int] = Field(None, ge=0)
    unit: Optional[str] = Field(None, max_length=20)
    price: Optional[Decimal] = Field(None, ge=0)
    cost: Optional[Decimal] = Field(None, ge=0)
    supplier: Optional[str] = Field(None, max_length=100)
    reorder_level: Optional[int] = Field(None, ge=0)

class InventoryItemData(BaseModel):
    id: int
    name: str
    sku: Optional[str] = None
    description: Optional[str] = None
    category: str
    quantity: int
    unit: str
    price: Decimal
    cost: Decimal
    supplier: Optional[str] = None
    reorder_level: int
    is_low_stock: bool
    created_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class InventoryItemResponse(BaseResponse):
    data: InventoryItemData

class InventoryListResponse(BaseResponse):
    count: int
    data: List[InventoryItemData]

class CategoriesResponse(BaseResponse):
    count: int
    data: List[str]
