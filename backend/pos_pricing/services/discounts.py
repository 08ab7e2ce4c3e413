from decimal import Decimal, ROUND_HALF_UP
from pydantic import ValidationError as SchemaError
from pos_pricing.core.exceptions import ValidationError
from pos_pricing.models.promotion import Promotion, PromotionKind, DiscountType
from pos_pricing.schemas.order import PricedLine, LinePromotion
from pos_pricing.schemas.promotion import DiscountShape, Percentage, FixedAmount, UniformPrice


ZERO = Decimal("0")
CENT = Decimal("0.01")


def quantize(amount: Decimal) -> Decimal:
    return Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def _require(value, promotion: Promotion, field: str):
    if value is None:
        raise ValidationError(f"Promotion '{promotion.name}' has no {field} configured")
    return value


def discount_shape_for(promotion: Promotion) -> DiscountShape:
    """
    Собрать форму скидки из колонок акции.
    Для happy_hour форма задаётся discount_type, для остальных видом акции.
    """
    try:
        return _build_shape(promotion)
    except SchemaError as e:
        raise ValidationError(f"Invalid discount configuration for promotion '{promotion.name}': {e.errors()[0]['msg']}")


def _build_shape(promotion: Promotion) -> DiscountShape:
    kind = promotion.kind

    if kind in (PromotionKind.ORDER_PERCENTAGE, PromotionKind.ITEM_PERCENTAGE):
        return Percentage(percentage=_require(promotion.percentage, promotion, "percentage"))

    if kind in (PromotionKind.ORDER_FIXED, PromotionKind.ITEM_FIXED):
        return FixedAmount(fixed_amount=_require(promotion.fixed_amount, promotion, "fixed amount"))

    if kind == PromotionKind.HAPPY_HOUR:
        if promotion.discount_type == DiscountType.PERCENTAGE:
            return Percentage(percentage=_require(promotion.percentage, promotion, "percentage"))
        elif promotion.discount_type == DiscountType.FIXED_AMOUNT:
            return FixedAmount(fixed_amount=_require(promotion.fixed_amount, promotion, "fixed amount"))
        elif promotion.discount_type == DiscountType.UNIFORM_PRICE:
            return UniformPrice(uniform_price=_require(promotion.uniform_price, promotion, "uniform price"))

    raise ValidationError(f"Unknown discount shape for promotion '{promotion.name}'")


def compute_item_discount(item: PricedLine, promotion: Promotion) -> Decimal:
    """
    Скидка на строку заказа, 0 <= скидка <= original_line_total.
    Вызывается только после проверки scope и расписания.
    """
    shape = discount_shape_for(promotion)
    line_total = item.original_line_total

    if isinstance(shape, Percentage):
        discount = line_total * shape.percentage / 100
    elif isinstance(shape, FixedAmount):
        discount = min(shape.fixed_amount * item.quantity, line_total)
    else:
        # Единая цена: скидка равна разнице до u * qty, наценки не бывает
        discount = max(ZERO, line_total - shape.uniform_price * item.quantity)

    return min(max(ZERO, quantize(discount)), line_total)


def order_amount_in_range(subtotal: Decimal, promotion: Promotion) -> bool:
    if subtotal < (promotion.min_order_amount or ZERO):
        return False
    if promotion.max_order_amount is not None and subtotal > promotion.max_order_amount:
        return False
    return True


def compute_order_discount(subtotal: Decimal, promotion: Promotion) -> Decimal:
    """Скидка на весь заказ для order_percentage / order_fixed"""
    if not promotion.is_order_level:
        raise ValidationError(f"Promotion '{promotion.name}' is not an order-level promotion")

    if not order_amount_in_range(subtotal, promotion):
        return ZERO

    shape = discount_shape_for(promotion)
    if isinstance(shape, Percentage):
        discount = subtotal * shape.percentage / 100
    else:
        discount = min(shape.fixed_amount, subtotal)

    return min(max(ZERO, quantize(discount)), subtotal)


def apply_discount_to_line(item: PricedLine, promotion: Promotion, discount: Decimal) -> None:
    """Записать скидку и новую цену в строку"""
    shape = discount_shape_for(promotion)

    if isinstance(shape, UniformPrice):
        item.final_unit_price = shape.uniform_price
        item.final_line_total = shape.uniform_price * item.quantity
    else:
        item.final_unit_price = quantize(item.original_unit_price - discount / item.quantity)
        item.final_line_total = item.original_line_total - discount

    item.applied_promotion = LinePromotion(
        promotion_id=promotion.id,
        name=promotion.name,
        kind=promotion.kind,
        discount_amount=discount,
    )
