from datetime import date

from config.constants import Frequency
from config.settings import CURRENCY_SYMBOL


def fmt_amount(value: float, symbol: str = CURRENCY_SYMBOL) -> str:
    """Format an amount: 1234.5 -> £1,234.50"""
    if value < 0:
        return f"-{symbol}{abs(value):,.2f}"
    return f"{symbol}{value:,.2f}"


def fmt_percent(value: float) -> str:
    """Format a percentage: 87.456 -> 87.5%"""
    return f"{value:.1f}%"


def ordinal_suffix(day: int) -> str:
    if 11 <= day % 100 <= 13:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")


def fmt_due_date(d: date) -> str:
    """Long display date: 2024-03-15 -> March 15th, 2024"""
    return f"{d.strftime('%B')} {d.day}{ordinal_suffix(d.day)}, {d.year}"


def fmt_rent_summary(amount: float, frequency: str, day_of_month: int = 1) -> str:
    """Rent card text: £950.00/month - Due 1st"""
    freq = Frequency(frequency)
    text = f"{fmt_amount(amount)}/{freq.period_label}"
    if freq is Frequency.MONTHLY:
        text += f" - Due {day_of_month}{ordinal_suffix(day_of_month)}"
    return text
