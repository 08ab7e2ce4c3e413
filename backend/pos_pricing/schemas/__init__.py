from .promotion import (
    PromotionResponse, PromotionListResponse, PromotionCreate, CouponValidateRequest, CouponValidationResponse,
    TimeSlot, Recurrence, Weekday, Percentage, FixedAmount, UniformPrice, DiscountShape,
)
from .order import (
    OrderLineCreate, ClientBills, OrderQuoteRequest, OrderCreate,
    PricedLine, LinePromotion, AppliedPromotion, OrderPricingResult,
    OrderItemResponse, OrderResponse,
)

__all__ = [
    "PromotionResponse", "PromotionListResponse", "PromotionCreate", "CouponValidateRequest", "CouponValidationResponse",
    "TimeSlot", "Recurrence", "Weekday", "Percentage", "FixedAmount", "UniformPrice", "DiscountShape",
    "OrderLineCreate", "ClientBills", "OrderQuoteRequest", "OrderCreate",
    "PricedLine", "LinePromotion", "AppliedPromotion", "OrderPricingResult",
    "OrderItemResponse", "OrderResponse",
]
