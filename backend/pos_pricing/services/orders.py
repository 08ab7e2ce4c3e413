import logging
import secrets
from decimal import Decimal
from datetime import datetime
from typing import List, Optional
from sqlmodel import Session
from pos_pricing.core.exceptions import ValidationError, EligibilityError
from pos_pricing.models.order import Order, OrderItem, OrderStatus
from pos_pricing.models.promotion import Promotion
from pos_pricing.schemas.order import (
    OrderCreate, OrderQuoteRequest, OrderLineCreate, PricedLine, OrderPricingResult,
)
from pos_pricing.services.discounts import order_amount_in_range
from pos_pricing.services.pricing import price_order
from pos_pricing.services.promotions import list_active_promotions, validate_coupon
from pos_pricing.services.reconciliation import validate_bills
from pos_pricing.services.time_window import is_now_within_recurrence, recurrence_of
from pos_pricing.services.usage import record_order_acceptance

logger = logging.getLogger(__name__)


def generate_order_number(now: datetime) -> str:
    """Генерация номера заказа"""
    timestamp = now.strftime("%y%m%d")
    random_part = secrets.token_hex(3).upper()
    return f"POS-{timestamp}-{random_part}"


def build_lines(items: List[OrderLineCreate]) -> List[PricedLine]:
    """Проверить позиции и подготовить строки для расчёта"""
    if not items:
        raise ValidationError("Order must contain at least one item")

    lines = []
    for index, item in enumerate(items):
        if not item.name or not item.name.strip():
            raise ValidationError(f"Item name is required for item at index {index}")
        if item.unit_price < 0:
            raise ValidationError(f"Valid price per quantity is required for item at index {index}")
        if item.quantity < 1:
            raise ValidationError(f"Valid quantity (minimum 1) is required for item at index {index}")

        lines.append(PricedLine.from_request(index, item))

    return lines


def resolve_order_promotion(
    db: Session,
    code: Optional[str],
    lines: List[PricedLine],
    now: datetime,
) -> Optional[Promotion]:
    """Промокод выбирает order-level семейство; без кода работают item-акции"""
    if not code:
        return None

    check = validate_coupon(db, code, now)
    if not check.valid:
        raise EligibilityError(check.reason)

    promo = check.promotion
    if not promo.is_order_level:
        raise EligibilityError(f"Coupon {promo.code} cannot be applied to the whole order")

    # validate_coupon расписание не смотрит, при оформлении заказа оно обязательно
    if not is_now_within_recurrence(recurrence_of(promo), now):
        raise EligibilityError(f"Coupon {promo.code} is not available at this time")

    subtotal = sum((line.original_line_total for line in lines), Decimal("0"))
    if not order_amount_in_range(subtotal, promo):
        raise EligibilityError(f"Order subtotal ({subtotal}) does not meet the conditions of coupon {promo.code}")

    return promo


def quote_order(db: Session, data: OrderQuoteRequest, now: datetime) -> OrderPricingResult:
    """Расчёт без сверки и без сохранения"""
    lines = build_lines(data.items)
    order_promotion = resolve_order_promotion(db, data.promotion_code, lines, now)
    promotions = [] if order_promotion else list_active_promotions(db, now)
    return price_order(lines, promotions, now, order_promotion)


def create_order(db: Session, data: OrderCreate, now: datetime) -> Order:
    """
    Создание заказа:
    расчёт -> сверка с суммами клиента -> сохранение -> учёт использования акций.
    """
    if data.bills.total < 0:
        raise ValidationError("Valid bill total is required")

    result = quote_order(db, data, now)
    validate_bills(data.bills, result)

    order = Order(
        order_number=generate_order_number(now),
        subtotal=result.subtotal,
        promotion_discount=result.promotion_discount,
        total=result.total,
        tax=data.bills.tax,
        total_with_tax=result.total + data.bills.tax,
        promotion_code=data.promotion_code.strip().upper() if data.promotion_code else None,
        applied_promotions=[p.model_dump(mode="json") for p in result.applied_promotions],
        status=OrderStatus.PENDING,
        notes=data.notes,
    )
    db.add(order)
    db.flush()

    for line in result.lines:
        db.add(OrderItem(
            order_id=order.id,
            line_id=line.line_id,
            item_id=line.item_id,
            category_id=line.category_id,
            name=line.name.strip(),
            quantity=line.quantity,
            original_unit_price=line.original_unit_price,
            original_line_total=line.original_line_total,
            final_unit_price=line.final_unit_price,
            final_line_total=line.final_line_total,
            promotion_id=line.applied_promotion.promotion_id if line.applied_promotion else None,
            discount_amount=line.discount_amount,
        ))

    db.commit()
    db.refresh(order)

    logger.info("Order %s accepted: total=%s", order.order_number, order.total)

    # Счётчики увеличиваем только после сохранения заказа
    record_order_acceptance(db, result.applied_promotions)

    db.refresh(order)
    return order
