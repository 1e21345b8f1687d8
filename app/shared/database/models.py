# app/shared/database/models.py
from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Text,
    Numeric, ForeignKey, CheckConstraint, func
)
from sqlalchemy.orm import relationship

from app.config.database import Base

# =====================================================
# MIXIN PARA TIMESTAMPS
# =====================================================
class TimestampMixin:
    """Mixin que agrega campos created_at y updated_at"""
    created_at = Column(DateTime, nullable=False, server_default=func.current_timestamp())
    updated_at = Column(DateTime, nullable=False, server_default=func.current_timestamp(), onupdate=func.current_timestamp())


# =====================================================
# USUARIOS
# =====================================================

class User(Base):
    """Modelo de Usuario"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), default='user', nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.current_timestamp())

    # Relationships
    sales = relationship("Sale", back_populates="user")


# =====================================================
# INVENTARIO
# =====================================================

class InventoryItem(Base, TimestampMixin):
    """Modelo canónico de Item de Inventario"""
    __tablename__ = "inventory_items"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, index=True)
    sku = Column(String(50), index=True)
    description = Column(String(500))
    category = Column(String(100), nullable=False, default='Other', index=True)
    quantity = Column(Integer, nullable=False, default=0)
    unit = Column(String(20), nullable=False, default='piece')
    price = Column(Numeric(10, 2), nullable=False, default=0)
    cost = Column(Numeric(10, 2), nullable=False, default=0)
    supplier = Column(String(100))
    reorder_level = Column(Integer, nullable=False, default=0)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))

    __table_args__ = (
        CheckConstraint('quantity >= 0', name='ck_inventory_items_quantity_non_negative'),
        CheckConstraint('price >= 0', name='ck_inventory_items_price_non_negative'),
        CheckConstraint('reorder_level >= 0', name='ck_inventory_items_reorder_non_negative'),
        # Los ids no se reutilizan: SaleItem.item_id es una referencia débil
        {'sqlite_autoincrement': True},
    )

    # Relationships
    inventory_changes = relationship("InventoryChange", back_populates="item")

    @property
    def is_low_stock(self) -> bool:
        return self.quantity <= self.reorder_level

    @property
    def is_out_of_stock(self) -> bool:
        return self.quantity == 0


class InventoryChange(Base):
    """Modelo de Cambios de Inventario (trazabilidad del ledger)"""
    __tablename__ = "inventory_changes"

    id = Column(Integer, primary_key=True, index=True)
    # SET NULL: el historial sobrevive al borrado del item
    item_id = Column(Integer, ForeignKey("inventory_items.id", ondelete="SET NULL"), index=True)
    change_type = Column(String(50), nullable=False)
    quantity_before = Column(Integer)
    quantity_after = Column(Integer)
    reference_id = Column(Integer)
    user_id = Column(Integer)
    notes = Column(String(255))
    created_at = Column(DateTime, nullable=False, server_default=func.current_timestamp())

    # Relationships
    item = relationship("InventoryItem", back_populates="inventory_changes")


# =====================================================
# VENTAS
# =====================================================

class Sale(Base):
    """Modelo de Venta"""
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, index=True)
    customer = Column(String(255), nullable=False)
    total = Column(Numeric(12, 2), nullable=False, default=0)
    payment_method = Column(String(50), nullable=False)
    status = Column(String(20), nullable=False, default='Pending', index=True)
    notes = Column(Text)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, server_default=func.current_timestamp(), index=True)

    __table_args__ = (
        CheckConstraint('total >= 0', name='ck_sales_total_non_negative'),
    )

    # Relationships
    user = relationship("User", back_populates="sales")
    items = relationship(
        "SaleItem",
        back_populates="sale",
        cascade="all, delete-orphan",
        order_by="SaleItem.position"
    )


class SaleItem(Base):
    """Modelo de Item de Venta (embebido en la venta)"""
    __tablename__ = "sale_items"

    id = Column(Integer, primary_key=True, index=True)
    sale_id = Column(Integer, ForeignKey("sales.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    # Referencia débil: el item puede borrarse de forma independiente
    item_id = Column(Integer, nullable=False, index=True)
    item_name = Column(String(100))
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    subtotal = Column(Numeric(12, 2), nullable=False)

    __table_args__ = (
        CheckConstraint('quantity >= 1', name='ck_sale_items_quantity_positive'),
        CheckConstraint('price >= 0', name='ck_sale_items_price_non_negative'),
    )

    # Relationships
    sale = relationship("Sale", back_populates="items")


# =====================================================
# NOTIFICACIONES
# =====================================================

class Notification(Base):
    """Modelo de Notificación"""
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    type = Column(String(20), nullable=False)
    message = Column(String(500), nullable=False)
    item_id = Column(Integer, ForeignKey("inventory_items.id", ondelete="SET NULL"), index=True)
    read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, server_default=func.current_timestamp(), index=True)

    # Relationships
    item = relationship("InventoryItem")
