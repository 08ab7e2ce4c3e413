from datetime import datetime
from decimal import Decimal
from itertools import count

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from pos_pricing.api.deps import get_db, get_clock
from pos_pricing.core.config import settings
from pos_pricing.main import app
from pos_pricing.models.promotion import Promotion, PromotionKind, PromotionScope
from pos_pricing.schemas.order import OrderLineCreate, PricedLine

# Среда, 4 марта 2026, 19:30 по часам ресторана
NOW = datetime(2026, 3, 4, 19, 30, tzinfo=settings.tzinfo)

_ids = count(1000)


def make_promotion(**overrides) -> Promotion:
    data = dict(
        id=next(_ids),
        name="Promo",
        kind=PromotionKind.ITEM_PERCENTAGE,
        percentage=Decimal("10"),
        scope=PromotionScope.ALL_ORDER,
        priority=0,
        start_date=datetime(2026, 1, 1),
        end_date=datetime(2026, 12, 31, 23, 59),
        is_active=True,
    )
    data.update(overrides)
    return Promotion(**data)


def make_line(unit_price, quantity=1, item_id=1, category_id=10, line_id=0, name="Pho") -> PricedLine:
    return PricedLine.from_request(
        line_id,
        OrderLineCreate(
            item_id=item_id,
            category_id=category_id,
            name=name,
            unit_price=Decimal(str(unit_price)),
            quantity=quantity,
        ),
    )


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def db(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def add_promotion(db):
    def _add(**overrides) -> Promotion:
        overrides.setdefault("id", None)
        promo = make_promotion(**overrides)
        db.add(promo)
        db.commit()
        db.refresh(promo)
        return promo
    return _add


@pytest.fixture
def clock():
    state = {"now": NOW}

    def _clock():
        return state["now"]

    _clock.state = state
    return _clock


@pytest.fixture
def client(engine, clock):
    def _get_db():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_clock] = lambda: clock
    yield TestClient(app)
    app.dependency_overrides.clear()
