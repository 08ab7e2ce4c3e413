from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from pos_pricing.models.order import OrderStatus
from pos_pricing.models.promotion import PromotionKind


class OrderLineCreate(BaseModel):
    item_id: int
    category_id: Optional[int] = None
    name: str
    unit_price: Decimal
    quantity: int


class ClientBills(BaseModel):
    """Суммы, посчитанные клиентом (POS-терминалом)"""
    subtotal: Optional[Decimal] = None
    promotion_discount: Optional[Decimal] = None
    total: Decimal
    tax: Decimal = Decimal("0")
    total_with_tax: Optional[Decimal] = None


class OrderQuoteRequest(BaseModel):
    items: List[OrderLineCreate]
    promotion_code: Optional[str] = None


class OrderCreate(OrderQuoteRequest):
    bills: ClientBills
    notes: Optional[str] = None


# === Результат расчёта ===

class LinePromotion(BaseModel):
    promotion_id: int
    name: str
    kind: PromotionKind
    discount_amount: Decimal


class PricedLine(BaseModel):
    line_id: int
    item_id: int
    category_id: Optional[int] = None
    name: str
    quantity: int
    original_unit_price: Decimal
    original_line_total: Decimal
    final_unit_price: Decimal
    final_line_total: Decimal
    applied_promotion: Optional[LinePromotion] = None

    @classmethod
    def from_request(cls, line_id: int, data: OrderLineCreate) -> "PricedLine":
        line_total = data.unit_price * data.quantity
        return cls(
            line_id=line_id,
            item_id=data.item_id,
            category_id=data.category_id,
            name=data.name,
            quantity=data.quantity,
            original_unit_price=data.unit_price,
            original_line_total=line_total,
            final_unit_price=data.unit_price,
            final_line_total=line_total,
        )

    @property
    def discount_amount(self) -> Decimal:
        if self.applied_promotion is None:
            return Decimal("0")
        return self.applied_promotion.discount_amount


class AppliedPromotion(BaseModel):
    promotion_id: int
    name: str
    kind: PromotionKind
    total_discount_amount: Decimal
    line_ids: List[int] = []


class OrderPricingResult(BaseModel):
    lines: List[PricedLine]
    subtotal: Decimal
    promotion_discount: Decimal
    total: Decimal
    applied_promotions: List[AppliedPromotion] = []


# === Ответы ===

class OrderItemResponse(BaseModel):
    id: int
    line_id: int
    item_id: int
    category_id: Optional[int] = None
    name: str
    quantity: int
    original_unit_price: Decimal
    original_line_total: Decimal
    final_unit_price: Decimal
    final_line_total: Decimal
    promotion_id: Optional[int] = None
    discount_amount: Decimal

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    id: int
    order_number: str

    subtotal: Decimal
    promotion_discount: Decimal
    total: Decimal
    tax: Decimal
    total_with_tax: Decimal

    promotion_code: Optional[str] = None
    applied_promotions: List[AppliedPromotion] = []
    status: OrderStatus
    notes: Optional[str] = None

    created_at: datetime
    items: List[OrderItemResponse] = []

    class Config:
        from_attributes = True
