"""
Seed-скрипт: демо-акции для кассы, если их ещё нет
Запуск: python -m pos_pricing.scripts.seed_promotions
"""
from datetime import timedelta

from sqlmodel import Session

from pos_pricing.core.clock import now_local
from pos_pricing.db.session import engine, init_db
from pos_pricing.schemas.promotion import PromotionCreate
from pos_pricing.services.promotions import create_promotion, get_promotion_by_code


def sample_promotions():
    start = now_local()
    return [
        PromotionCreate(
            code="SAVE10",
            name="10% Off All Orders",
            description="Get 10% discount on your entire order",
            kind="order_percentage",
            discount={"type": "percentage", "percentage": 10},
            min_order_amount=20000,
            priority=1,
            start_date=start,
            end_date=start + timedelta(days=30),
        ),
        PromotionCreate(
            code="HAPPYHOUR",
            name="Happy Hour - 35k Drinks",
            description="Uniform price for beverages during happy hour",
            kind="happy_hour",
            discount={"type": "uniform_price", "uniform_price": 35000},
            scope="categories",
            category_ids=[1],
            recurrence={
                "time_slots": [{"start": "15:00", "end": "17:00"}, {"start": "20:00", "end": "22:00"}],
                "days_of_week": ["monday", "tuesday", "wednesday", "thursday", "friday"],
            },
            priority=2,
            start_date=start,
            end_date=start + timedelta(days=365),
        ),
        PromotionCreate(
            code="WEEKEND5K",
            name="Weekend Special - 5k Off",
            description="Fixed discount on weekend orders",
            kind="order_fixed",
            discount={"type": "fixed_amount", "fixed_amount": 5000},
            min_order_amount=25000,
            recurrence={"days_of_week": ["saturday", "sunday"]},
            usage_limit=100,
            priority=1,
            start_date=start,
            end_date=start + timedelta(days=60),
        ),
    ]


def seed_promotions():
    """Создание демо-акций, существующие коды пропускаются"""
    with Session(engine) as session:
        for data in sample_promotions():
            if get_promotion_by_code(session, data.code):
                print(f"Promotion already exists: {data.code}")
                continue
            promo = create_promotion(session, data)
            print(f"Promotion created: {promo.code}")


def main():
    print("Creating tables...")
    init_db()
    print("Seeding promotions...")
    seed_promotions()
    print("Done!")


if __name__ == "__main__":
    main()
