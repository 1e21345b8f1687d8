# app/modules/sales/schemas.py
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional, Dict, Any
from decimal import Decimal
from datetime import datetime
from enum import Enum
from app.shared.schemas.common import BaseResponse

class PaymentMethod(str, Enum):
    CASH = "Cash"
    CREDIT_CARD = "Credit Card"
    DEBIT_CARD = "Debit Card"
    PAYPAL = "PayPal"
    BANK_TRANSFER = "Bank Transfer"

class SaleStatus(str, Enum):
    PENDING = "Pending"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"

class StatsPeriod(str, Enum):
    DAILY = "daily"
    MONTHLY = "monthly"
    YEARLY = "yearly"

class SaleLineItem(BaseModel):
    item_id: int = Field(..., description="ID del item de inventario")
    quantity: int = Field(..., ge=1, description="Cantidad")
    # Mismo rango que SaleItem.price: Numeric(10, 2)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2, description="Precio unitario")

    @property
    def subtotal(self) -> Decimal:
        return self.quantity * self.price

class SaleCreateRequest(BaseModel):
    customer: str = Field(..., min_length=1, max_length=255, description="Cliente")
    # Lista vacía permitida aquí: el servicio la rechaza con InvalidArgument
    items: List[SaleLineItem] = Field(..., description="Items de la venta")
    payment_method: PaymentMethod
    status: SaleStatus = SaleStatus.PENDING
    notes: Optional[str] = Field(None, max_length=500)

    @field_validator('customer')
    @classmethod
    def validate_customer(cls, v):
        if not v.strip():
            raise ValueError('El cliente no puede estar vacío')
        return v.strip()

class SaleUpdateRequest(BaseModel):
    customer: Optional[str] = Field(None, min_length=1, max_length=255)
    payment_method: Optional[PaymentMethod] = None
    status: Optional[SaleStatus] = None
    notes: Optional[str] = Field(None, max_length=500)
    # Aceptado solo para poder rechazarlo explícitamente
    items: Optional[List[SaleLineItem]] = None

class SaleItemData(BaseModel):
    item_id: int
    item_name: Optional[str] = None
    quantity: int
    price: Decimal
    subtotal: Decimal

    class Config:
        from_attributes = True

class SaleData(BaseModel):
    id: int
    customer: str
    items: List[SaleItemData]
    total: Decimal
    payment_method: str
    status: str
    notes: Optional[str] = None
    user_id: int
    created_at: datetime

    class Config:
        from_attributes = True

class SaleResponse(BaseResponse):
    data: SaleData

class SaleListResponse(BaseResponse):
    count: int
    data: List[SaleData]

class SalesStatsResponse(BaseResponse):
    period: StatsPeriod
    data: List[Dict[str, Any]]
