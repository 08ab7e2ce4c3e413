from fastapi import APIRouter, Depends, Query
from sqlmodel import Session
from typing import List, Optional
from math import ceil
from datetime import datetime
from pos_pricing.api.deps import get_db, get_now
from pos_pricing.models.promotion import PromotionKind
from pos_pricing.schemas.promotion import (
    PromotionResponse, PromotionListResponse, PromotionCreate,
    CouponValidateRequest, CouponValidationResponse,
)
from pos_pricing.services.pricing import filter_active_now, sort_by_priority
from pos_pricing.services.promotions import (
    list_active_promotions, list_promotions, get_promotion, validate_coupon,
    create_promotion, update_promotion, delete_promotion, toggle_promotion_status,
)

router = APIRouter(prefix="/api/promotions", tags=["promotions"])


@router.get("/", response_model=PromotionListResponse)
def list_all_promotions(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    q: Optional[str] = Query(None, description="Search by name, description or code"),
    kind: Optional[PromotionKind] = Query(None),
    is_active: Optional[bool] = Query(None),
    db: Session = Depends(get_db),
):
    """Все акции с фильтрами"""
    promotions, total = list_promotions(db, page, page_size, q=q, kind=kind, is_active=is_active)
    return PromotionListResponse(
        items=[PromotionResponse.model_validate(p) for p in promotions],
        total=total,
        page=page,
        page_size=page_size,
        pages=ceil(total / page_size) if total > 0 else 1,
    )


@router.get("/active", response_model=List[PromotionResponse])
def list_current_promotions(db: Session = Depends(get_db), now: datetime = Depends(get_now)):
    """Акции, действующие прямо сейчас (с учётом расписания)"""
    promotions = filter_active_now(list_active_promotions(db, now), now)
    return sort_by_priority(promotions)


@router.post("/validate-coupon", response_model=CouponValidationResponse)
def validate_coupon_code(
    data: CouponValidateRequest,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """Проверить промокод (не расходует лимит)"""
    check = validate_coupon(db, data.code, now)
    return CouponValidationResponse(
        valid=check.valid,
        reason=check.reason,
        promotion=PromotionResponse.model_validate(check.promotion) if check.promotion else None,
    )


@router.get("/{promotion_id}", response_model=PromotionResponse)
def get_promotion_detail(promotion_id: int, db: Session = Depends(get_db)):
    return get_promotion(db, promotion_id)


@router.post("/", response_model=PromotionResponse)
def create_new_promotion(data: PromotionCreate, db: Session = Depends(get_db)):
    """Создать акцию"""
    return create_promotion(db, data)


@router.put("/{promotion_id}", response_model=PromotionResponse)
def replace_promotion(promotion_id: int, data: PromotionCreate, db: Session = Depends(get_db)):
    """Обновить акцию целиком (те же проверки, что при создании)"""
    return update_promotion(db, promotion_id, data)


@router.delete("/{promotion_id}")
def remove_promotion(promotion_id: int, db: Session = Depends(get_db)):
    delete_promotion(db, promotion_id)
    return {"message": "Promotion deleted", "deleted_id": promotion_id}


@router.patch("/{promotion_id}/toggle-status", response_model=PromotionResponse)
def toggle_status(promotion_id: int, db: Session = Depends(get_db)):
    """Включить / выключить акцию"""
    return toggle_promotion_status(db, promotion_id)
