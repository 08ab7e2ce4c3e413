from datetime import datetime
from fastapi import Depends
from sqlmodel import Session
from pos_pricing.db.session import engine
from pos_pricing.core.clock import Clock, now_local


def get_db():
    with Session(engine) as session:
        yield session


def get_clock() -> Clock:
    """Источник текущего времени; в тестах подменяется через dependency_overrides"""
    return now_local


def get_now(clock: Clock = Depends(get_clock)) -> datetime:
    return clock()
