from .promotion import Promotion, PromotionKind, DiscountType, PromotionScope, ORDER_KINDS, ITEM_KINDS
from .order import Order, OrderItem, OrderStatus

__all__ = [
    "Promotion", "PromotionKind", "DiscountType", "PromotionScope", "ORDER_KINDS", "ITEM_KINDS",
    "Order", "OrderItem", "OrderStatus",
]
