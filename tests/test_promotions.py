"""
Promotion store, coupon validation and promotion creation.
"""

from datetime import datetime
from decimal import Decimal

import pytest

from pos_pricing.core.config import settings
from pos_pricing.core.exceptions import ValidationError, NotFoundError
from pos_pricing.models.order import Order
from pos_pricing.models.promotion import Promotion, PromotionKind, DiscountType
from pos_pricing.schemas.promotion import PromotionCreate
from pos_pricing.services import promotions as promotion_service
from pos_pricing.services.promotions import (
    COUPON_EXHAUSTED, COUPON_INVALID, COUPON_REQUIRED, COUPON_VALID,
    create_promotion, generate_promotion_code, list_active_promotions, validate_coupon,
    update_promotion, delete_promotion, toggle_promotion_status,
)
from conftest import NOW


class TestStore:
    def test_lists_active_in_store_order(self, db, add_promotion):
        a = add_promotion(name="a", priority=1)
        b = add_promotion(name="b", priority=9)
        add_promotion(name="off", is_active=False)
        add_promotion(name="future", start_date=datetime(2026, 6, 1))

        assert [p.id for p in list_active_promotions(db, NOW)] == [a.id, b.id]


class TestCoupon:
    def test_valid_code_is_case_insensitive(self, db, add_promotion):
        promo = add_promotion(code="SUMMER10")
        check = validate_coupon(db, "  summer10 ", NOW)
        assert check.valid
        assert check.reason == COUPON_VALID
        assert check.promotion.id == promo.id

    def test_missing_code(self, db):
        assert validate_coupon(db, "", NOW) == (False, COUPON_REQUIRED, None)
        assert validate_coupon(db, None, NOW).reason == COUPON_REQUIRED

    def test_unknown_inactive_or_expired(self, db, add_promotion):
        add_promotion(code="OFF", is_active=False)
        add_promotion(code="OLD", end_date=datetime(2026, 1, 31))

        for code in ("NOPE", "OFF", "OLD"):
            check = validate_coupon(db, code, NOW)
            assert not check.valid
            assert check.reason == COUPON_INVALID

    def test_exhausted(self, db, add_promotion):
        add_promotion(code="LIMITED", usage_limit=3, usage_count=3)
        check = validate_coupon(db, "LIMITED", NOW)
        assert not check.valid
        assert check.reason == COUPON_EXHAUSTED
        assert check.promotion is None

    def test_validation_does_not_consume_usage(self, db, add_promotion):
        promo = add_promotion(code="ONCE", usage_limit=1)
        for _ in range(3):
            assert validate_coupon(db, "ONCE", NOW).valid
        db.refresh(promo)
        assert promo.usage_count == 0


class TestCodeGeneration:
    def test_code_from_name(self, db):
        code = generate_promotion_code(db, "Happy hour!")
        assert code.startswith("HAPPY")
        assert len(code) == 9

    def test_gives_up_after_bounded_attempts(self, db, add_promotion, monkeypatch):
        add_promotion(code="HAPPYAAAA")
        calls = []

        def fixed_token(nbytes):
            calls.append(nbytes)
            return "aaaa"

        monkeypatch.setattr(promotion_service.secrets, "token_hex", fixed_token)

        with pytest.raises(ValidationError, match="unique promotion code"):
            generate_promotion_code(db, "Happy hour")
        assert len(calls) == settings.PROMO_CODE_MAX_ATTEMPTS


def promotion_payload(**overrides):
    data = dict(
        name="Evening Happy Hour",
        kind="happy_hour",
        discount={"type": "uniform_price", "uniform_price": "35000"},
        recurrence={"time_slots": [{"start": "23:00", "end": "02:00"}], "days_of_week": ["friday"]},
        start_date="2026-01-01T00:00:00",
        end_date="2026-12-31T23:59:00",
    )
    data.update(overrides)
    return data


class TestCreate:
    def test_flattens_discount_shape(self, db):
        promo = create_promotion(db, PromotionCreate(**promotion_payload(code="late")))

        assert promo.code == "LATE"
        assert promo.discount_type == DiscountType.UNIFORM_PRICE
        assert promo.uniform_price == Decimal("35000")
        assert promo.percentage is None
        assert promo.time_slots == [{"start": "23:00", "end": "02:00"}]
        assert promo.days_of_week == ["friday"]

    def test_generates_code_when_absent(self, db):
        promo = create_promotion(db, PromotionCreate(**promotion_payload()))
        assert promo.code.startswith("EVENI")

    def test_duplicate_code_rejected(self, db):
        create_promotion(db, PromotionCreate(**promotion_payload(code="DUP")))
        with pytest.raises(ValidationError, match="already exists"):
            create_promotion(db, PromotionCreate(**promotion_payload(code="dup")))

    def test_non_happy_hour_has_no_discount_type(self, db):
        payload = promotion_payload(kind="order_percentage", discount={"type": "percentage", "percentage": 10})
        promo = create_promotion(db, PromotionCreate(**payload))
        assert promo.kind == PromotionKind.ORDER_PERCENTAGE
        assert promo.discount_type is None
        assert promo.percentage == 10


class TestCreateValidation:
    @pytest.mark.parametrize("overrides", [
        {"end_date": "2025-12-31T00:00:00"},
        {"kind": "item_fixed"},
        {"kind": "order_percentage", "discount": {"type": "fixed_amount", "fixed_amount": 100}},
        {"discount": {"type": "percentage", "percentage": 0}},
        {"discount": {"type": "percentage", "percentage": 101}},
        {"discount": {"type": "bogus", "value": 1}},
        {"recurrence": {"time_slots": [{"start": "25:00", "end": "02:00"}]}},
        {"scope": "specific_items"},
        {"min_order_amount": 500, "max_order_amount": 100},
    ])
    def test_invalid_combinations_rejected(self, overrides):
        with pytest.raises(ValueError):
            PromotionCreate(**promotion_payload(**overrides))


class TestDateStorage:
    def test_dates_are_stored_as_naive_local_time(self, db):
        payload = promotion_payload(start_date="2026-01-01T00:00:00+00:00")
        promo = create_promotion(db, PromotionCreate(**payload))

        db.expire_all()
        stored = db.get(Promotion, promo.id)
        assert stored.start_date == datetime(2026, 1, 1, 7, 0)
        assert stored.start_date.tzinfo is None
        assert stored.created_at.tzinfo is None

    def test_datetime_columns_are_timezone_naive(self):
        for column in ("start_date", "end_date", "created_at"):
            assert Promotion.__table__.c[column].type.timezone is False
        assert Order.__table__.c["created_at"].type.timezone is False


class TestManagement:
    def test_update_keeps_code_and_usage(self, db, add_promotion):
        promo = add_promotion(code="LATE", usage_limit=5, usage_count=4)

        updated = update_promotion(db, promo.id, PromotionCreate(**promotion_payload(usage_limit=10)))

        assert updated.code == "LATE"
        assert updated.usage_count == 4
        assert updated.kind == PromotionKind.HAPPY_HOUR
        assert updated.uniform_price == Decimal("35000")

    def test_update_cannot_drop_limit_below_usage(self, db, add_promotion):
        promo = add_promotion(usage_limit=5, usage_count=4)
        with pytest.raises(ValidationError, match="cannot be lower"):
            update_promotion(db, promo.id, PromotionCreate(**promotion_payload(usage_limit=3)))

    def test_toggle_and_delete(self, db, add_promotion):
        promo = add_promotion(code="FLIP")

        assert toggle_promotion_status(db, promo.id).is_active is False
        assert not validate_coupon(db, "FLIP", NOW).valid
        assert toggle_promotion_status(db, promo.id).is_active is True

        delete_promotion(db, promo.id)
        assert db.get(Promotion, promo.id) is None
        with pytest.raises(NotFoundError):
            toggle_promotion_status(db, promo.id)
