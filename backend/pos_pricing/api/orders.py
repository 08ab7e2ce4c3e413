from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session
from datetime import datetime
from pos_pricing.api.deps import get_db, get_now
from pos_pricing.models.order import Order
from pos_pricing.schemas.order import OrderCreate, OrderQuoteRequest, OrderResponse, OrderPricingResult
from pos_pricing.services.orders import create_order, quote_order

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.post("/quote", response_model=OrderPricingResult)
def quote_new_order(
    data: OrderQuoteRequest,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """Цена заказа по расчёту сервера, без сохранения"""
    return quote_order(db, data, now)


@router.post("", response_model=OrderResponse)
def create_new_order(
    data: OrderCreate,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """Создать заказ; суммы клиента сверяются с расчётом сервера"""
    return create_order(db, data, now)


@router.get("/{order_id}", response_model=OrderResponse)
def get_order(order_id: int, db: Session = Depends(get_db)):
    order = db.get(Order, order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order
