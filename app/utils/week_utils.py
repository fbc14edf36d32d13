from datetime import date, datetime, timedelta
from typing import Optional, Tuple
from app.core.config import settings


def get_week_boundaries(day: date, week_start_day: Optional[int] = None) -> Tuple[date, date]:
    """
    Devuelve (inicio, fin) de la semana que contiene `day`.

    El día de inicio se toma de settings.WEEK_START_DAY (0 = lunes) y se
    aplica igual a viajes, ledger y liquidaciones. El fin es inclusivo.
    """
    if isinstance(day, datetime):
        day = day.date()
    if week_start_day is None:
        week_start_day = settings.WEEK_START_DAY
    offset = (day.weekday() - week_start_day) % 7
    week_start = day - timedelta(days=offset)
    return week_start, week_start + timedelta(days=6)


def get_current_week_boundaries() -> Tuple[date, date]:
    return get_week_boundaries(date.today())


def is_same_week(first: date, second: date) -> bool:
    return get_week_boundaries(first)[0] == get_week_boundaries(second)[0]


def week_label(week_start: date, week_end: date) -> str:
    """Etiqueta legible, p.ej. 'Jun 30 - Jul 06, 2025'."""
    return f"{week_start.strftime('%b %d')} - {week_end.strftime('%b %d, %Y')}"
