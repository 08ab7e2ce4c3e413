from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, DateTime, JSON
from pydantic import NaiveDatetime
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROGRESS = "progress"
    READY = "ready"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Order(SQLModel, table=True):
    __tablename__ = "orders"

    id: Optional[int] = Field(default=None, primary_key=True)
    order_number: str = Field(unique=True, index=True)

    # Суммы (пересчитаны сервером)
    subtotal: Decimal = Field(max_digits=12, decimal_places=2)
    promotion_discount: Decimal = Field(default=Decimal("0"), max_digits=12, decimal_places=2)
    total: Decimal = Field(max_digits=12, decimal_places=2)
    tax: Decimal = Field(default=Decimal("0"), max_digits=12, decimal_places=2)
    total_with_tax: Decimal = Field(max_digits=12, decimal_places=2)

    promotion_code: Optional[str] = None
    # [{"promotion_id": 1, "name": ..., "kind": ..., "total_discount_amount": ..., "line_ids": [...]}]
    applied_promotions: List[dict] = Field(default_factory=list, sa_column=Column(JSON))

    status: OrderStatus = Field(default=OrderStatus.PENDING)
    notes: Optional[str] = None

    created_at: NaiveDatetime = Field(default_factory=datetime.utcnow, sa_column=Column(DateTime, nullable=False))

    # Relationships
    items: List["OrderItem"] = Relationship(back_populates="order")


class OrderItem(SQLModel, table=True):
    __tablename__ = "order_items"

    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: int = Field(foreign_key="orders.id", index=True)
    line_id: int

    # Данные блюда на момент заказа, каталог не проверяется
    item_id: int
    category_id: Optional[int] = None
    name: str

    quantity: int
    original_unit_price: Decimal = Field(max_digits=12, decimal_places=2)
    original_line_total: Decimal = Field(max_digits=12, decimal_places=2)
    final_unit_price: Decimal = Field(max_digits=12, decimal_places=2)
    final_line_total: Decimal = Field(max_digits=12, decimal_places=2)

    promotion_id: Optional[int] = Field(default=None, index=True)
    discount_amount: Decimal = Field(default=Decimal("0"), max_digits=12, decimal_places=2)

    # Relationships
    order: Optional["Order"] = Relationship(back_populates="items")
