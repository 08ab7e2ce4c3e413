from sqlmodel import SQLModel, Field
from sqlalchemy import Column, DateTime, JSON
from pydantic import NaiveDatetime
from typing import Optional, List, Dict
from datetime import datetime
from decimal import Decimal
from enum import Enum


class PromotionKind(str, Enum):
    ORDER_PERCENTAGE = "order_percentage"
    ORDER_FIXED = "order_fixed"
    ITEM_PERCENTAGE = "item_percentage"
    ITEM_FIXED = "item_fixed"
    HAPPY_HOUR = "happy_hour"


ORDER_KINDS = (PromotionKind.ORDER_PERCENTAGE, PromotionKind.ORDER_FIXED)
ITEM_KINDS = (PromotionKind.ITEM_PERCENTAGE, PromotionKind.ITEM_FIXED, PromotionKind.HAPPY_HOUR)


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"
    UNIFORM_PRICE = "uniform_price"


class PromotionScope(str, Enum):
    ALL_ORDER = "all_order"
    SPECIFIC_ITEMS = "specific_items"
    CATEGORIES = "categories"


class Promotion(SQLModel, table=True):
    __tablename__ = "promotions"

    id: Optional[int] = Field(default=None, primary_key=True)
    code: Optional[str] = Field(default=None, unique=True, index=True)  # Всегда в верхнем регистре
    name: str
    description: Optional[str] = None

    kind: PromotionKind = Field(index=True)
    discount_type: Optional[DiscountType] = None  # Только для happy_hour
    priority: int = Field(default=0)  # Выше = важнее

    # Параметры скидки, заполнен ровно один
    percentage: Optional[Decimal] = Field(default=None, max_digits=5, decimal_places=2)
    fixed_amount: Optional[Decimal] = Field(default=None, max_digits=12, decimal_places=2)
    uniform_price: Optional[Decimal] = Field(default=None, max_digits=12, decimal_places=2)

    # К чему применяется
    scope: PromotionScope = Field(default=PromotionScope.ALL_ORDER)
    item_ids: List[int] = Field(default_factory=list, sa_column=Column(JSON))
    category_ids: List[int] = Field(default_factory=list, sa_column=Column(JSON))

    # Повторяющееся расписание: [{"start": "23:00", "end": "02:00"}], ["monday", ...]
    time_slots: List[Dict[str, str]] = Field(default_factory=list, sa_column=Column(JSON))
    days_of_week: List[str] = Field(default_factory=list, sa_column=Column(JSON))

    # Ограничения по сумме заказа (только для order_*)
    min_order_amount: Decimal = Field(default=Decimal("0"), max_digits=12, decimal_places=2)
    max_order_amount: Optional[Decimal] = Field(default=None, max_digits=12, decimal_places=2)

    usage_limit: Optional[int] = None
    usage_count: int = Field(default=0)
    per_customer_limit: Optional[int] = None  # Хранится, но не проверяется

    # Локальное время ресторана, без tzinfo
    start_date: NaiveDatetime = Field(sa_column=Column(DateTime, nullable=False))
    end_date: NaiveDatetime = Field(sa_column=Column(DateTime, nullable=False))
    is_active: bool = Field(default=True)

    created_at: NaiveDatetime = Field(default_factory=datetime.utcnow, sa_column=Column(DateTime, nullable=False))

    @property
    def is_order_level(self) -> bool:
        return self.kind in ORDER_KINDS

    @property
    def remaining_usage(self) -> Optional[int]:
        if self.usage_limit is None:
            return None
        return max(0, self.usage_limit - self.usage_count)

    @property
    def is_usage_exhausted(self) -> bool:
        return self.usage_limit is not None and self.usage_count >= self.usage_limit
