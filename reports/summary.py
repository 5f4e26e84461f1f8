"""
Aggregazioni per i report: totali per proprietà, per mese e per categoria.

Tutte le funzioni ricevono esplicitamente l'anno (scheletro di 12 mesi,
anche vuoti, per assi dei grafici stabili) e/o la data di oggi (prenotazioni
passate vs future): nessuna lettura dell'orologio qui dentro.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Set

import pandas as pd

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.dates import days_in_month, iter_days, month_key, month_keys, parse_date
from core.models import EXPENSE_CATEGORIES, Booking

OVERALL = "overall"


def _empty_categories() -> Dict[str, float]:
    return {c: 0.0 for c in EXPENSE_CATEGORIES}


def _occupied_days(bookings: Iterable[Booking]) -> Set[date]:
    """Giorni coperti da almeno una prenotazione (arrivo..partenza inclusi)."""
    days = set()
    for b in bookings:
        arrival = parse_date(b.date_arrival)
        departure = parse_date(b.date_departure)
        if arrival is None or departure is None:
            continue
        days.update(iter_days(arrival, departure))
    return days


def group_by_property(
    bookings: List[Booking], known_properties: Iterable[str] = ()
) -> Dict[str, List[Booking]]:
    """Prenotazioni per proprietà; le proprietà note senza prenotazioni restano con lista vuota."""
    grouped: Dict[str, List[Booking]] = {name: [] for name in known_properties}
    for b in bookings:
        grouped.setdefault(b.house_name, []).append(b)
    return grouped


def financial_summary(bookings: List[Booking], today: date) -> dict:
    """
    Riepilogo finanziario complessivo.
    L'utile netto considera solo quanto già incassato (partenza prima di oggi).
    """
    total_earnings = 0.0
    earned_to_date = 0.0
    expenses = 0.0
    by_category = _empty_categories()
    by_guest: Dict[str, float] = {}

    for b in bookings:
        by_guest[b.name] = by_guest.get(b.name, 0.0) + b.total_amount
        total_earnings += b.total_amount
        departure = parse_date(b.date_departure)
        if departure is not None and departure < today:
            earned_to_date += b.total_amount
        for e in b.expenses:
            expenses += e.amount
            by_category[e.category] = by_category.get(e.category, 0.0) + e.amount

    return {
        "total_earnings": total_earnings,
        "earned_to_date": earned_to_date,
        "expenses": expenses,
        "net_profit": earned_to_date - expenses,
        "expenses_by_category": by_category,
        "bookings_by_guest": by_guest,
    }


def monthly_stats(bookings: List[Booking], year: int) -> pd.DataFrame:
    """
    Una riga per mese dell'anno: incassi e spese (per mese di arrivo),
    giorni occupati/liberi, numero prenotazioni.
    """
    keys = month_keys(year)
    stats = {
        k: {"income": 0.0, "expenses": 0.0, "booking_count": 0} for k in keys
    }

    for b in bookings:
        arrival = parse_date(b.date_arrival)
        if arrival is None:
            continue
        k = month_key(arrival)
        if k in stats:
            stats[k]["income"] += b.total_amount
            stats[k]["expenses"] += b.total_expenses
            stats[k]["booking_count"] += 1

    occupied = _occupied_days(bookings)
    rows = []
    for k in keys:
        total_days = days_in_month(k)
        occ = sum(1 for d in occupied if month_key(d) == k)
        rows.append({
            "month": k,
            "label": pd.Timestamp(f"{k}-01").strftime("%B %Y"),
            "income": stats[k]["income"],
            "expenses": stats[k]["expenses"],
            "profit": stats[k]["income"] - stats[k]["expenses"],
            "occupied_days": occ,
            "empty_days": total_days - occ,
            "total_days": total_days,
            "booking_count": stats[k]["booking_count"],
        })
    return pd.DataFrame(rows)


def expense_totals(
    bookings: List[Booking], year: int, known_properties: Iterable[str] = ()
) -> pd.DataFrame:
    """
    Pivot spese: indice (proprietà, mese YYYY-MM), colonne = categorie.

    Il mese è quello della data della singola spesa, non dell'arrivo.
    Tutti i 12 mesi sono presenti per ogni proprietà, anche a zero.
    """
    keys = month_keys(year)
    grouped = group_by_property(bookings, known_properties)

    records = []
    for prop, prop_bookings in grouped.items():
        for b in prop_bookings:
            for e in b.expenses:
                d = parse_date(e.date)
                if d is None:
                    continue
                records.append({
                    "property": prop,
                    "month": month_key(d),
                    "category": e.category,
                    "amount": e.amount,
                })

    index = pd.MultiIndex.from_product(
        [list(grouped.keys()), keys], names=["property", "month"]
    )
    df = pd.DataFrame(records, columns=["property", "month", "category", "amount"])
    df = df[df["month"].isin(keys)]
    if df.empty:
        return pd.DataFrame(0.0, index=index, columns=EXPENSE_CATEGORIES)

    pivot = df.pivot_table(
        values="amount",
        index=["property", "month"],
        columns="category",
        aggfunc="sum",
        fill_value=0.0,
    )
    return pivot.reindex(index=index, columns=EXPENSE_CATEGORIES, fill_value=0.0).astype(float)


@dataclass
class PropertyStats:
    """Statistiche di una proprietà (o di tutte, per "overall") sull'anno."""
    monthly_revenue: Dict[str, float] = field(default_factory=dict)
    monthly_expenses: Dict[str, float] = field(default_factory=dict)
    monthly_occupancy: Dict[str, float] = field(default_factory=dict)
    total_revenue: float = 0.0
    total_expenses: float = 0.0
    expenses_by_category: Dict[str, float] = field(default_factory=_empty_categories)
    past_bookings: List[Booking] = field(default_factory=list)
    future_bookings: List[Booking] = field(default_factory=list)

    @property
    def total_profit(self) -> float:
        return self.total_revenue - self.total_expenses


def property_stats(bookings: List[Booking], year: int, today: date) -> PropertyStats:
    keys = month_keys(year)
    stats = PropertyStats(
        monthly_revenue={k: 0.0 for k in keys},
        monthly_expenses={k: 0.0 for k in keys},
    )

    for b in bookings:
        departure = parse_date(b.date_departure)
        if departure is not None and departure < today:
            stats.past_bookings.append(b)
        else:
            stats.future_bookings.append(b)

        arrival = parse_date(b.date_arrival)
        if arrival is None or month_key(arrival) not in stats.monthly_revenue:
            continue

        stats.monthly_revenue[month_key(arrival)] += b.total_amount
        stats.total_revenue += b.total_amount
        for e in b.expenses:
            d = parse_date(e.date)
            if d is not None and month_key(d) in stats.monthly_expenses:
                stats.monthly_expenses[month_key(d)] += e.amount
            stats.total_expenses += e.amount
            stats.expenses_by_category[e.category] = (
                stats.expenses_by_category.get(e.category, 0.0) + e.amount
            )

    occupied = _occupied_days(bookings)
    for k in keys:
        occ = sum(1 for d in occupied if month_key(d) == k)
        stats.monthly_occupancy[k] = occ / days_in_month(k) * 100
    return stats


def chart_data(
    bookings_by_property: Dict[str, List[Booking]], year: int, today: date
) -> Dict[str, PropertyStats]:
    """
    Statistiche per ogni proprietà più la voce "overall":
    somme di incassi/spese, occupazione media tra le proprietà.
    """
    data = {
        prop: property_stats(bookings, year, today)
        for prop, bookings in bookings_by_property.items()
    }

    keys = month_keys(year)
    per_prop = list(data.values())
    n = len(per_prop)
    overall = PropertyStats(
        monthly_revenue={k: sum(p.monthly_revenue[k] for p in per_prop) for k in keys},
        monthly_expenses={k: sum(p.monthly_expenses[k] for p in per_prop) for k in keys},
        monthly_occupancy={
            k: (sum(p.monthly_occupancy[k] for p in per_prop) / n) if n else 0.0
            for k in keys
        },
        total_revenue=sum(p.total_revenue for p in per_prop),
        total_expenses=sum(p.total_expenses for p in per_prop),
        expenses_by_category={
            c: sum(p.expenses_by_category.get(c, 0.0) for p in per_prop)
            for c in EXPENSE_CATEGORIES
        },
        past_bookings=[b for p in per_prop for b in p.past_bookings],
        future_bookings=[b for p in per_prop for b in p.future_bookings],
    )
    data[OVERALL] = overall
    return data


def bookings_frame(bookings: List[Booking]) -> pd.DataFrame:
    """Elenco prenotazioni per visualizzazione tabellare / export."""
    rows = []
    for b in bookings:
        rows.append({
            "proprieta": b.house_name,
            "ospite": b.name,
            "arrivo": b.date_arrival,
            "partenza": b.date_departure,
            "notti": b.nights,
            "ospiti": b.people,
            "totale": round(b.total_amount, 2),
            "spese": round(b.total_expenses, 2),
            "netto": round(b.total_amount - b.total_expenses, 2),
            "consecutiva": b.is_consecutive_stay,
            "fonte": b.source,
            "id": b.id,
        })
    return pd.DataFrame(rows)
