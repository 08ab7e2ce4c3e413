import logging
from typing import Iterable, List
from sqlalchemy import update, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session
from pos_pricing.core.exceptions import NotFoundError
from pos_pricing.models.promotion import Promotion

logger = logging.getLogger(__name__)


def increment_usage(db: Session, promotion_id: int) -> bool:
    """
    Атомарно увеличить usage_count одним UPDATE.
    Условие в WHERE не даёт превысить usage_limit при параллельных заказах.
    """
    stmt = (
        update(Promotion)
        .where(
            Promotion.id == promotion_id,
            or_(Promotion.usage_limit == None, Promotion.usage_count < Promotion.usage_limit),  # noqa: E711
        )
        .values(usage_count=Promotion.usage_count + 1)
        .execution_options(synchronize_session=False)
    )
    result = db.exec(stmt)

    if result.rowcount:
        return True

    if db.get(Promotion, promotion_id) is None:
        raise NotFoundError(f"Promotion {promotion_id} not found")

    return False


def record_usage(db: Session, promotion_ids: Iterable[int]) -> List[int]:
    """
    Учесть использование акций принятого заказа.
    Вызывается только после сохранения заказа; ошибки здесь заказ не отменяют.
    """
    # dict.fromkeys: уникальные id с сохранением порядка
    promotion_ids = list(dict.fromkeys(promotion_ids))
    recorded = []

    try:
        for promotion_id in promotion_ids:
            try:
                if increment_usage(db, promotion_id):
                    recorded.append(promotion_id)
                else:
                    logger.warning("Promotion %s usage limit reached, usage not recorded", promotion_id)
            except NotFoundError as e:
                logger.warning("Skipping usage for missing promotion: %s", e.message)

        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to record promotion usage for %s", promotion_ids)
        return []

    return recorded


def record_order_acceptance(db: Session, applied_promotions) -> List[int]:
    """Точка входа для принятого заказа: список AppliedPromotion"""
    return record_usage(db, [p.promotion_id for p in applied_promotions])
