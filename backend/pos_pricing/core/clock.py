from datetime import datetime
from typing import Callable
from pos_pricing.core.config import settings


Clock = Callable[[], datetime]


def now_local() -> datetime:
    """Текущее время в часовом поясе ресторана"""
    return datetime.now(settings.tzinfo)


def to_local(moment: datetime) -> datetime:
    """
    Привести момент к часам ресторана.
    Naive datetime считается уже локальным.
    """
    if moment.tzinfo is None:
        return moment.replace(tzinfo=settings.tzinfo)
    return moment.astimezone(settings.tzinfo)


def to_naive_local(moment: datetime) -> datetime:
    """Локальное время без tzinfo, в таком виде даты акций хранятся в БД"""
    return to_local(moment).replace(tzinfo=None)
