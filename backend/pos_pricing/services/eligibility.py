from pos_pricing.models.promotion import Promotion, PromotionScope
from pos_pricing.schemas.order import PricedLine


def is_item_eligible(item: PricedLine, promotion: Promotion) -> bool:
    """Подходит ли позиция заказа под scope акции"""
    if promotion.scope == PromotionScope.ALL_ORDER:
        return True
    elif promotion.scope == PromotionScope.SPECIFIC_ITEMS:
        return item.item_id in (promotion.item_ids or [])
    elif promotion.scope == PromotionScope.CATEGORIES:
        return item.category_id is not None and item.category_id in (promotion.category_ids or [])
    return False
