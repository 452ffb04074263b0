"""
Display helpers for amounts, weights and dates.

Vietnamese conventions: dots group thousands, dates read day/month/year.
"""

from datetime import date, datetime, timezone, tzinfo
from typing import Optional

from fruit_invoice.config import get_settings
from fruit_invoice.models.invoice import round_amount


def format_currency_vnd(amount: float, symbol: Optional[str] = None) -> str:
    """60000 -> '60.000 ₫'."""
    symbol = symbol if symbol is not None else get_settings().app.currency_symbol
    grouped = f"{round_amount(amount):,}".replace(",", ".")
    return f"{grouped} {symbol}".rstrip()


def format_weight(weight_kg: float) -> str:
    """1.5 -> '1.5 kg', 2.0 -> '2 kg'."""
    text = f"{weight_kg:.3f}".rstrip("0").rstrip(".")
    return f"{text} kg"


def format_date_time(created_at: str, tz: Optional[tzinfo] = None) -> str:
    """
    '2024-05-01T10:00:00.000Z' -> '01/05/2024 10:00'.

    The timestamp's own offset is kept unless a target zone is given;
    naive timestamps are read as UTC.
    """
    moment = datetime.fromisoformat(created_at)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    if tz is not None:
        moment = moment.astimezone(tz)
    return moment.strftime("%d/%m/%Y %H:%M")


def format_date_only(date_key: str) -> str:
    """'2024-05-01' -> '01/05/2024'."""
    return date.fromisoformat(date_key[:10]).strftime("%d/%m/%Y")
