from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List, Dict, Literal, Union, Annotated
from datetime import datetime
from decimal import Decimal
from enum import Enum
from pos_pricing.core.clock import to_naive_local
from pos_pricing.models.promotion import PromotionKind, DiscountType, PromotionScope


TIME_PATTERN = r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$"


class Weekday(str, Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"


# Порядок совпадает с datetime.weekday()
WEEKDAYS = list(Weekday)


class TimeSlot(BaseModel):
    start: str = Field(pattern=TIME_PATTERN)
    end: str = Field(pattern=TIME_PATTERN)

    @staticmethod
    def to_minutes(value: str) -> int:
        hours, minutes = value.split(":")
        return int(hours) * 60 + int(minutes)

    @property
    def start_minutes(self) -> int:
        return self.to_minutes(self.start)

    @property
    def end_minutes(self) -> int:
        return self.to_minutes(self.end)


class Recurrence(BaseModel):
    time_slots: List[TimeSlot] = []
    days_of_week: List[Weekday] = []


# === Форма скидки (tagged union) ===

class Percentage(BaseModel):
    type: Literal["percentage"] = "percentage"
    percentage: Decimal = Field(gt=0, le=100)


class FixedAmount(BaseModel):
    type: Literal["fixed_amount"] = "fixed_amount"
    fixed_amount: Decimal = Field(ge=0)


class UniformPrice(BaseModel):
    type: Literal["uniform_price"] = "uniform_price"
    uniform_price: Decimal = Field(ge=0)


DiscountShape = Annotated[Union[Percentage, FixedAmount, UniformPrice], Field(discriminator="type")]

# Какие формы допустимы для каждого вида акции
ALLOWED_SHAPES = {
    PromotionKind.ORDER_PERCENTAGE: (Percentage,),
    PromotionKind.ITEM_PERCENTAGE: (Percentage,),
    PromotionKind.ORDER_FIXED: (FixedAmount,),
    PromotionKind.ITEM_FIXED: (FixedAmount,),
    PromotionKind.HAPPY_HOUR: (Percentage, FixedAmount, UniformPrice),
}


class PromotionResponse(BaseModel):
    id: int
    code: Optional[str] = None
    name: str
    description: Optional[str] = None
    kind: PromotionKind
    discount_type: Optional[DiscountType] = None
    priority: int
    percentage: Optional[Decimal] = None
    fixed_amount: Optional[Decimal] = None
    uniform_price: Optional[Decimal] = None
    scope: PromotionScope
    item_ids: List[int] = []
    category_ids: List[int] = []
    time_slots: List[Dict[str, str]] = []
    days_of_week: List[str] = []
    min_order_amount: Decimal
    max_order_amount: Optional[Decimal] = None
    usage_limit: Optional[int] = None
    usage_count: int
    remaining_usage: Optional[int] = None
    per_customer_limit: Optional[int] = None
    start_date: datetime
    end_date: datetime
    is_active: bool

    class Config:
        from_attributes = True


class PromotionListResponse(BaseModel):
    """Пагинированный список"""
    items: List[PromotionResponse]
    total: int
    page: int
    page_size: int
    pages: int


class PromotionCreate(BaseModel):
    code: Optional[str] = None
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    kind: PromotionKind
    discount: DiscountShape
    priority: int = 0
    scope: PromotionScope = PromotionScope.ALL_ORDER
    item_ids: List[int] = []
    category_ids: List[int] = []
    recurrence: Recurrence = Recurrence()
    min_order_amount: Decimal = Field(default=Decimal("0"), ge=0)
    max_order_amount: Optional[Decimal] = Field(default=None, ge=0)
    usage_limit: Optional[int] = Field(default=None, ge=1)
    per_customer_limit: Optional[int] = Field(default=None, ge=1)
    start_date: datetime
    end_date: datetime
    is_active: bool = True

    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip().upper()
        if len(value) > 20:
            raise ValueError("Promotion code must be at most 20 characters")
        return value or None

    @model_validator(mode="after")
    def check_consistency(self):
        if to_naive_local(self.end_date) <= to_naive_local(self.start_date):
            raise ValueError("end_date must be after start_date")

        if not isinstance(self.discount, ALLOWED_SHAPES[self.kind]):
            raise ValueError(f"Discount type '{self.discount.type}' is not allowed for '{self.kind.value}' promotions")

        if self.max_order_amount is not None and self.max_order_amount < self.min_order_amount:
            raise ValueError("max_order_amount must not be less than min_order_amount")

        if self.scope == PromotionScope.SPECIFIC_ITEMS and not self.item_ids:
            raise ValueError("item_ids are required for specific_items scope")
        if self.scope == PromotionScope.CATEGORIES and not self.category_ids:
            raise ValueError("category_ids are required for categories scope")

        return self

    def to_columns(self) -> dict:
        """Развернуть tagged union в колонки таблицы promotions"""
        data = self.model_dump(exclude={"discount", "recurrence"})
        data.update(
            percentage=None,
            fixed_amount=None,
            uniform_price=None,
            time_slots=[slot.model_dump() for slot in self.recurrence.time_slots],
            days_of_week=[day.value for day in self.recurrence.days_of_week],
            # В БД даты хранятся по локальным часам без tzinfo
            start_date=to_naive_local(self.start_date),
            end_date=to_naive_local(self.end_date),
        )

        shape = self.discount
        if isinstance(shape, Percentage):
            data["percentage"] = shape.percentage
        elif isinstance(shape, FixedAmount):
            data["fixed_amount"] = shape.fixed_amount
        else:
            data["uniform_price"] = shape.uniform_price

        # discount_type хранится только для happy hour
        data["discount_type"] = DiscountType(shape.type) if self.kind == PromotionKind.HAPPY_HOUR else None
        return data


class CouponValidateRequest(BaseModel):
    code: Optional[str] = None


class CouponValidationResponse(BaseModel):
    valid: bool
    reason: str
    promotion: Optional[PromotionResponse] = None
