from typing import Union
from decimal import Decimal


def format_amount(value: Decimal) -> str:
    """34200.00 -> '34200', 0.50 -> '0.5'"""
    value = Decimal(value)
    if value == value.to_integral_value():
        return str(int(value))
    return f"{value.normalize():f}"


class PricingError(Exception):
    """Базовая ошибка расчёта заказа"""
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_detail(self) -> Union[dict, str]:
        return self.message


class ValidationError(PricingError):
    """Некорректные входные данные (пустой заказ, отрицательная цена и т.п.)"""


class EligibilityError(PricingError):
    """Промокод отсутствует, истёк, выключен или исчерпан"""


class NotFoundError(PricingError):
    status_code = 404


class ReconciliationError(PricingError):
    """Сумма клиента не совпадает с пересчитанной сервером"""

    def __init__(self, client_value: Decimal, calculated_value: Decimal, label: str = "total"):
        self.client_value = client_value
        self.calculated_value = calculated_value
        self.label = label
        super().__init__(
            f"Bill {label} ({format_amount(client_value)}) does not match "
            f"calculated {label} ({format_amount(calculated_value)})"
        )

    def to_detail(self) -> dict:
        return {
            "message": self.message,
            "field": self.label,
            "client_value": float(self.client_value),
            "calculated_value": float(self.calculated_value),
        }
