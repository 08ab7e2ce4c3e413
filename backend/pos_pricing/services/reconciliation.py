import logging
from decimal import Decimal
from typing import Optional
from pos_pricing.core.config import settings
from pos_pricing.core.exceptions import ReconciliationError
from pos_pricing.schemas.order import ClientBills, OrderPricingResult

logger = logging.getLogger(__name__)


def amounts_match(client_value: Decimal, calculated_value: Decimal, tolerance: Optional[Decimal] = None) -> bool:
    if tolerance is None:
        tolerance = settings.PRICE_TOLERANCE
    return abs(Decimal(client_value) - Decimal(calculated_value)) <= tolerance


def validate(client_total: Decimal, recomputed_total: Decimal, label: str = "total") -> None:
    """Сумма клиента должна совпасть с пересчитанной в пределах допуска"""
    if not amounts_match(client_total, recomputed_total):
        logger.warning("Bill %s mismatch: client=%s calculated=%s", label, client_total, recomputed_total)
        raise ReconciliationError(client_total, recomputed_total, label)


def validate_bills(bills: ClientBills, result: OrderPricingResult) -> None:
    """
    Сверка всех сумм клиента с расчётом сервера.
    total проверяется всегда, остальные только если клиент их прислал.
    """
    if bills.subtotal is not None:
        validate(bills.subtotal, result.subtotal, "subtotal")

    validate(bills.total, result.total)

    if bills.promotion_discount is not None:
        validate(bills.promotion_discount, result.promotion_discount, "promotion discount")

    if bills.total_with_tax is not None:
        validate(bills.total_with_tax, result.total + bills.tax, "total with tax")
