import logging
import re
import secrets
from datetime import datetime
from typing import List, NamedTuple, Optional, Tuple
from sqlmodel import Session, select, col
from pos_pricing.core.clock import to_naive_local
from pos_pricing.core.config import settings
from pos_pricing.core.exceptions import ValidationError, NotFoundError
from pos_pricing.models.promotion import Promotion, PromotionKind
from pos_pricing.schemas.promotion import PromotionCreate

logger = logging.getLogger(__name__)


COUPON_REQUIRED = "Coupon code is required"
COUPON_INVALID = "Invalid or expired coupon code"
COUPON_EXHAUSTED = "Coupon usage limit exceeded"
COUPON_VALID = "Coupon is valid"


class CouponCheck(NamedTuple):
    valid: bool
    reason: str
    promotion: Optional[Promotion] = None


def list_active_promotions(db: Session, as_of: datetime) -> List[Promotion]:
    """Включённые акции, в окно дат которых попадает as_of (порядок хранилища)"""
    now = to_naive_local(as_of)

    stmt = select(Promotion).where(
        Promotion.is_active == True,  # noqa: E712
        Promotion.start_date <= now,
        Promotion.end_date >= now,
    ).order_by(Promotion.id)

    return list(db.exec(stmt).all())


def get_promotion_by_code(db: Session, code: str) -> Optional[Promotion]:
    """Поиск без учёта регистра: коды хранятся в верхнем регистре"""
    stmt = select(Promotion).where(Promotion.code == code.strip().upper())
    return db.exec(stmt).first()


def check_coupon(promotion: Optional[Promotion], now: datetime) -> CouponCheck:
    if promotion is None or not promotion.is_active:
        return CouponCheck(False, COUPON_INVALID)

    local = to_naive_local(now)
    if not (promotion.start_date <= local <= promotion.end_date):
        return CouponCheck(False, COUPON_INVALID)

    if promotion.is_usage_exhausted:
        return CouponCheck(False, COUPON_EXHAUSTED)

    return CouponCheck(True, COUPON_VALID, promotion)


def validate_coupon(db: Session, code: Optional[str], now: datetime) -> CouponCheck:
    """Проверка промокода. Только чтение, usage_count не меняется"""
    if not code or not code.strip():
        return CouponCheck(False, COUPON_REQUIRED)

    return check_coupon(get_promotion_by_code(db, code), now)


def generate_promotion_code(db: Session, name: str) -> str:
    """
    Код из первых букв названия и случайного суффикса.
    Число попыток ограничено настройкой PROMO_CODE_MAX_ATTEMPTS.
    """
    prefix = re.sub(r"[^A-Za-z0-9]", "", name)[:5].upper() or "PROMO"

    for _ in range(settings.PROMO_CODE_MAX_ATTEMPTS):
        code = f"{prefix}{secrets.token_hex(2).upper()}"
        if get_promotion_by_code(db, code) is None:
            return code
        logger.info("Generated promotion code %s already exists, retrying", code)

    raise ValidationError("Could not generate a unique promotion code")


def create_promotion(db: Session, data: PromotionCreate) -> Promotion:
    if data.code:
        if get_promotion_by_code(db, data.code):
            raise ValidationError("Promotion code already exists")
        code = data.code
    else:
        code = generate_promotion_code(db, data.name)

    columns = data.to_columns()
    columns["code"] = code

    promo = Promotion(**columns)
    db.add(promo)
    db.commit()
    db.refresh(promo)

    logger.info("Promotion created: id=%s code=%s kind=%s", promo.id, promo.code, promo.kind.value)
    return promo


def get_promotion(db: Session, promotion_id: int) -> Promotion:
    promo = db.get(Promotion, promotion_id)
    if not promo:
        raise NotFoundError("Promotion not found")
    return promo


def list_promotions(
    db: Session,
    page: int = 1,
    page_size: int = 20,
    q: Optional[str] = None,
    kind: Optional[PromotionKind] = None,
    is_active: Optional[bool] = None,
) -> Tuple[List[Promotion], int]:
    """Все акции с фильтрами, новые первыми. Возвращает (страница, всего)"""
    stmt = select(Promotion)

    if q:
        search = f"%{q}%"
        stmt = stmt.where(
            (col(Promotion.name).ilike(search)) |
            (col(Promotion.description).ilike(search)) |
            (col(Promotion.code).ilike(search))
        )

    if kind:
        stmt = stmt.where(Promotion.kind == kind)

    if is_active is not None:
        stmt = stmt.where(Promotion.is_active == is_active)

    stmt = stmt.order_by(Promotion.id.desc())
    all_promotions = db.exec(stmt).all()

    offset = (page - 1) * page_size
    return list(all_promotions[offset:offset + page_size]), len(all_promotions)


def update_promotion(db: Session, promotion_id: int, data: PromotionCreate) -> Promotion:
    """
    Полная замена настроек акции.
    usage_count и created_at сохраняются; без code в запросе остаётся прежний код.
    """
    promo = get_promotion(db, promotion_id)

    if data.code and data.code != promo.code:
        existing = db.exec(
            select(Promotion).where(Promotion.code == data.code, Promotion.id != promotion_id)
        ).first()
        if existing:
            raise ValidationError("Promotion code already exists")

    if data.usage_limit is not None and data.usage_limit < promo.usage_count:
        raise ValidationError(
            f"Usage limit ({data.usage_limit}) cannot be lower than current usage ({promo.usage_count})"
        )

    columns = data.to_columns()
    columns["code"] = data.code or promo.code

    for key, value in columns.items():
        setattr(promo, key, value)

    db.add(promo)
    db.commit()
    db.refresh(promo)

    logger.info("Promotion updated: id=%s code=%s", promo.id, promo.code)
    return promo


def delete_promotion(db: Session, promotion_id: int) -> None:
    """Прошлые заказы хранят promotion_id без внешнего ключа и не затрагиваются"""
    promo = get_promotion(db, promotion_id)
    db.delete(promo)
    db.commit()
    logger.info("Promotion deleted: id=%s", promotion_id)


def toggle_promotion_status(db: Session, promotion_id: int) -> Promotion:
    promo = get_promotion(db, promotion_id)
    promo.is_active = not promo.is_active
    db.add(promo)
    db.commit()
    db.refresh(promo)

    logger.info("Promotion %s %s", promo.id, "activated" if promo.is_active else "deactivated")
    return promo
