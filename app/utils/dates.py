import calendar
import datetime as dt
from typing import Union

from dateutil.relativedelta import relativedelta

from app.core.errors import InvalidInput, UnsupportedFrequency

DateLike = Union[dt.date, dt.datetime, str]

# Fin de la ventana mensual: 23:59:59.999
MONTH_END_TIME = dt.time(23, 59, 59, 999000)

_PERIODS = {
    "daily": relativedelta(days=1),
    "weekly": relativedelta(days=7),
    # relativedelta recorta al último día del mes destino (31/01 -> 28/02)
    "monthly": relativedelta(months=1),
    "annually": relativedelta(years=1),
}


def to_datetime(value: DateLike) -> dt.datetime:
    """Normaliza a datetime naive en UTC."""
    if isinstance(value, dt.datetime):
        return value.astimezone(dt.timezone.utc).replace(tzinfo=None) if value.tzinfo else value

    if isinstance(value, dt.date):
        return dt.datetime.combine(value, dt.time.min)

    if isinstance(value, str):
        s = value.strip().replace("Z", "+00:00")
        try:
            parsed = dt.datetime.fromisoformat(s)
        except ValueError:
            raise InvalidInput("Invalid date", f"Invalid date: {value!r}")
        return to_datetime(parsed)

    raise InvalidInput("Invalid date", f"Unsupported type for date: {type(value)!r}")


def calculate_next_due_date(current_date: DateLike, frequency) -> dt.datetime:
    """
    Devuelve la fecha de la siguiente ocurrencia sumando exactamente un periodo
    de `frequency` a `current_date`.
    """
    base = to_datetime(current_date)
    key = getattr(frequency, "value", frequency)
    period = _PERIODS.get(key)
    if period is None:
        raise UnsupportedFrequency(error=f"Unknown frequency: {frequency}")
    return base + period


def month_bounds(month: int, year: int) -> tuple[dt.datetime, dt.datetime]:
    """(inicio, fin) inclusivos del mes: día 1 00:00:00 hasta el último día 23:59:59.999."""
    last_day = calendar.monthrange(year, month)[1]
    start = dt.datetime(year, month, 1)
    end = dt.datetime.combine(dt.date(year, month, last_day), MONTH_END_TIME)
    return start, end
