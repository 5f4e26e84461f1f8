"""
Utility per date di calendario (stringhe ISO YYYY-MM-DD, nessun fuso orario).
"""

import calendar
from datetime import date, datetime, timedelta
from typing import Iterator, Optional


def parse_date(val) -> Optional[date]:
    """Converte una stringa data in date. Valori mancanti o non validi → None."""
    if val is None:
        return None
    if isinstance(val, datetime):
        return val.date()
    if isinstance(val, date):
        return val
    s = str(val).strip()
    if s in ("", "-", "nan", "NaT", "None"):
        return None
    # "2025-01-05" oppure "2025-01-05 00:00:00" / "2025-01-05T14:00:00"
    try:
        return datetime.strptime(s[:10], "%Y-%m-%d").date()
    except ValueError:
        pass
    for fmt in ("%d/%m/%Y", "%m/%d/%Y"):
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            continue
    return None


def to_iso(val) -> str:
    """Data in formato YYYY-MM-DD, stringa vuota se non interpretabile."""
    d = parse_date(val)
    return d.isoformat() if d else ""


def month_key(d: date) -> str:
    return d.strftime("%Y-%m")


def month_keys(year: int) -> list:
    """Le 12 chiavi YYYY-MM dell'anno."""
    return [f"{year:04d}-{m:02d}" for m in range(1, 13)]


def days_in_month(key: str) -> int:
    year, month = (int(p) for p in key.split("-"))
    return calendar.monthrange(year, month)[1]


def iter_days(start: date, end: date) -> Iterator[date]:
    """Giorni da start a end inclusi."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)
