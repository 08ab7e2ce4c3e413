from datetime import datetime
from pos_pricing.core.clock import to_local, to_naive_local
from pos_pricing.models.promotion import Promotion
from pos_pricing.schemas.promotion import Recurrence, TimeSlot, WEEKDAYS


def recurrence_of(promotion: Promotion) -> Recurrence:
    """Расписание акции из JSON-колонок"""
    return Recurrence(
        time_slots=promotion.time_slots or [],
        days_of_week=promotion.days_of_week or [],
    )


def is_time_in_slot(slot: TimeSlot, minutes: int) -> bool:
    start, end = slot.start_minutes, slot.end_minutes

    # Слот через полночь, например 23:00-02:00
    if start > end:
        return minutes >= start or minutes <= end

    return start <= minutes <= end


def is_day_valid(recurrence: Recurrence, now: datetime) -> bool:
    if not recurrence.days_of_week:
        return True

    local = to_local(now)
    return WEEKDAYS[local.weekday()] in recurrence.days_of_week


def is_now_within_recurrence(recurrence: Recurrence, now: datetime) -> bool:
    """
    Проверить день недели и временные слоты.
    Пустые списки не ограничивают акцию.
    """
    if not is_day_valid(recurrence, now):
        return False

    if not recurrence.time_slots:
        return True

    local = to_local(now)
    minutes = local.hour * 60 + local.minute
    return any(is_time_in_slot(slot, minutes) for slot in recurrence.time_slots)


def is_within_active_window(promotion: Promotion, now: datetime) -> bool:
    local = to_naive_local(now)
    return promotion.start_date <= local <= promotion.end_date
