import logging
from decimal import Decimal
from datetime import datetime
from typing import Optional, List, Dict
from pos_pricing.models.promotion import Promotion, ITEM_KINDS
from pos_pricing.schemas.order import PricedLine, AppliedPromotion, OrderPricingResult
from pos_pricing.services.discounts import (
    ZERO, compute_item_discount, compute_order_discount, apply_discount_to_line,
)
from pos_pricing.services.eligibility import is_item_eligible
from pos_pricing.services.time_window import (
    recurrence_of, is_now_within_recurrence, is_within_active_window,
)

logger = logging.getLogger(__name__)


def is_promotion_active_now(promotion: Promotion, now: datetime) -> bool:
    """Включена, в окне дат, в расписании и лимит не исчерпан"""
    if not promotion.is_active:
        return False
    if not is_within_active_window(promotion, now):
        return False
    if promotion.is_usage_exhausted:
        return False
    return is_now_within_recurrence(recurrence_of(promotion), now)


def filter_active_now(promotions: List[Promotion], now: datetime) -> List[Promotion]:
    return [p for p in promotions if is_promotion_active_now(p, now)]


def sort_by_priority(promotions: List[Promotion]) -> List[Promotion]:
    """
    По убыванию priority. Сортировка стабильная: при равном приоритете
    сохраняется порядок из хранилища.
    """
    return sorted(promotions, key=lambda p: p.priority or 0, reverse=True)


def select_item_promotions(lines: List[PricedLine], candidates: List[Promotion]) -> List[PricedLine]:
    """
    Для каждой строки применяется ПЕРВАЯ подходящая акция с положительной скидкой.
    candidates уже отсортированы по приоритету. Лучшая скидка не ищется.
    """
    for line in lines:
        for promo in candidates:
            if not is_item_eligible(line, promo):
                continue

            discount = compute_item_discount(line, promo)
            if discount <= ZERO:
                # Нулевая скидка = акция не применена, смотрим следующую
                continue

            apply_discount_to_line(line, promo, discount)
            break

    return lines


def aggregate_applied(lines: List[PricedLine]) -> List[AppliedPromotion]:
    """Свести скидки строк по акциям, в порядке первого применения"""
    by_id: Dict[int, AppliedPromotion] = {}

    for line in lines:
        applied = line.applied_promotion
        if applied is None:
            continue

        record = by_id.get(applied.promotion_id)
        if record is None:
            record = AppliedPromotion(
                promotion_id=applied.promotion_id,
                name=applied.name,
                kind=applied.kind,
                total_discount_amount=ZERO,
            )
            by_id[applied.promotion_id] = record

        record.total_discount_amount += applied.discount_amount
        record.line_ids.append(line.line_id)

    return list(by_id.values())


def build_result(
    lines: List[PricedLine],
    applied: List[AppliedPromotion],
    order_discount: Decimal = ZERO,
) -> OrderPricingResult:
    subtotal = sum((line.original_line_total for line in lines), ZERO)
    line_discount = sum((line.discount_amount for line in lines), ZERO)
    promotion_discount = line_discount + order_discount

    return OrderPricingResult(
        lines=lines,
        subtotal=subtotal,
        promotion_discount=promotion_discount,
        total=max(subtotal - promotion_discount, ZERO),
        applied_promotions=applied,
    )


def price_order(
    lines: List[PricedLine],
    promotions: List[Promotion],
    now: datetime,
    order_promotion: Optional[Promotion] = None,
) -> OrderPricingResult:
    """
    Рассчитать заказ.

    Семейства акций не смешиваются: если передана order_promotion, скидка
    считается один раз от subtotal, а строки остаются по исходной цене.
    Иначе к строкам применяются item-акции (item_*, happy_hour).
    """
    if order_promotion is not None:
        subtotal = sum((line.original_line_total for line in lines), ZERO)
        discount = compute_order_discount(subtotal, order_promotion)

        applied = []
        if discount > ZERO:
            applied.append(AppliedPromotion(
                promotion_id=order_promotion.id,
                name=order_promotion.name,
                kind=order_promotion.kind,
                total_discount_amount=discount,
                line_ids=[line.line_id for line in lines],
            ))

        result = build_result(lines, applied, order_discount=discount)
    else:
        candidates = [p for p in filter_active_now(promotions, now) if p.kind in ITEM_KINDS]
        candidates = sort_by_priority(candidates)
        select_item_promotions(lines, candidates)
        result = build_result(lines, aggregate_applied(lines))

    logger.info(
        "Order priced: lines=%s subtotal=%s discount=%s total=%s promotions=%s",
        len(result.lines),
        result.subtotal,
        result.promotion_discount,
        result.total,
        [p.name for p in result.applied_promotions],
    )
    return result
