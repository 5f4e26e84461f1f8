"""
Continuità dei soggiorni: riconosce prenotazioni back-to-back dello stesso ospite.

Le prenotazioni vengono raggruppate per nome ospite (Name del CSV, non un ID
univoco) e ordinate per data di arrivo. Per ciascuna si calcola:
  - is_consecutive_stay:      l'arrivo coincide con la partenza di un'altra
                              prenotazione dello stesso ospite (niente pulizie)
  - is_first_booking_of_stay: inizia un soggiorno fisico (welcome package)
  - previous_stay:            soggiorno precedente in ordine di arrivo, solo
                              se separato da almeno un giorno
"""

from collections import OrderedDict
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Optional

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.dates import parse_date
from core.models import Booking, PreviousStay


@dataclass
class StayFlags:
    is_consecutive_stay: bool
    is_first_booking_of_stay: bool
    previous_stay: Optional[PreviousStay] = None


def _arrival_sort_key(b: Booking):
    # Date non valide in fondo; sorted() è stabile → a parità resta l'ordine del CSV
    d = parse_date(b.date_arrival)
    return (d is None, d or date.min)


def group_by_guest(bookings: List[Booking]) -> Dict[str, List[Booking]]:
    """Raggruppa per nome ospite, ogni gruppo ordinato per arrivo."""
    groups: Dict[str, List[Booking]] = OrderedDict()
    for b in bookings:
        groups.setdefault(b.name, []).append(b)
    for name, group in groups.items():
        groups[name] = sorted(group, key=_arrival_sort_key)
    return groups


def _continues_other(group: List[Booking], idx: int) -> bool:
    """Un'altra prenotazione del gruppo parte il giorno in cui questa arriva."""
    arrival = parse_date(group[idx].date_arrival)
    if arrival is None:
        return False
    for j, other in enumerate(group):
        if j == idx:
            continue
        if parse_date(other.date_departure) == arrival:
            return True
    return False


def _previous_stay(group: List[Booking], idx: int) -> Optional[PreviousStay]:
    """Prenotazione immediatamente precedente in ordine di arrivo, se c'è un intervallo."""
    if idx == 0:
        return None
    prev = group[idx - 1]
    arrival = parse_date(group[idx].date_arrival)
    prev_departure = parse_date(prev.date_departure)
    if arrival is None or prev_departure is None:
        return None
    gap = (arrival - prev_departure).days
    if gap <= 0:
        return None
    return PreviousStay(
        house_name=prev.house_name,
        date_departure=prev.date_departure,
        days_gap=gap,
    )


def resolve_stays(group: List[Booking]) -> List[StayFlags]:
    """
    Calcola i flag per un gruppo (stesso ospite, già ordinato per arrivo).
    Restituisce una lista parallela al gruppo.

    Il controllo "consecutivo" guarda tutto il gruppo, mentre previous_stay
    usa solo l'adiacenza nell'ordinamento: con 3+ prenotazioni sovrapposte
    i due concetti possono divergere e vanno tenuti distinti.
    """
    flags = []
    for idx in range(len(group)):
        is_consecutive = _continues_other(group, idx)
        is_first = not _continues_other(group, idx)
        previous = None if is_consecutive else _previous_stay(group, idx)
        flags.append(StayFlags(
            is_consecutive_stay=is_consecutive,
            is_first_booking_of_stay=is_first,
            previous_stay=previous,
        ))
    return flags
