"""
Modelli dati: Booking (prenotazione Lodgify) e BookingExpense (voce di spesa).
"""

from dataclasses import dataclass, field
from typing import List, Optional


EXPENSE_CATEGORIES = [
    "Cleaning",
    "Management-Transaction",
    "Management-Commission",
    "Management-VAT",
    "Management-Wine",
    "Management-Coffee",
    "Management-Water",
    "Management-Tea",
    "Management-Slippers",
    "Other",
]


@dataclass
class BookingExpense:
    """Una voce del registro spese di una prenotazione."""
    id: str                 # "<prefisso>-<id prenotazione>", stabile
    category: str           # una di EXPENSE_CATEGORIES
    amount: float           # sempre >= 0
    description: str
    date: str               # YYYY-MM-DD, di default l'arrivo


@dataclass
class PreviousStay:
    """Soggiorno precedente dello stesso ospite, separato da almeno un giorno."""
    house_name: str
    date_departure: str
    days_gap: int


@dataclass
class GuestDetails:
    """Dati extra dell'ospite dal foglio XLSX (check-in / questura)."""
    birthplace: Optional[str] = None
    nationality: Optional[str] = None
    passport: Optional[str] = None
    address: Optional[str] = None
    accompanying_guests: Optional[list] = None


@dataclass
class Booking:
    """Una prenotazione dall'export CSV Lodgify."""
    id: str
    name: str               # nome ospite (chiave di raggruppamento soggiorni)
    house_name: str
    date_arrival: str       # YYYY-MM-DD
    date_departure: str     # YYYY-MM-DD
    nights: int             # come da export, non ricalcolato
    people: int             # >= 1
    total_amount: float     # importo pagato dall'ospite
    type: str = ""
    source: str = ""
    source_text: str = ""
    house_id: str = ""
    room_types: str = ""
    date_created: str = ""
    currency: str = ""
    status: str = ""
    email: str = ""
    phone: str = ""
    country_name: str = "N/A"
    room_rates_total: float = 0.0
    promotions_total: float = 0.0
    fees_total: float = 0.0
    taxes_total: float = 0.0
    add_ons_total: float = 0.0
    amount_paid: float = 0.0
    balance_due: float = 0.0
    owner_first_name: str = ""
    owner_last_name: str = ""
    owner_email: str = ""
    owner_payout: float = 0.0
    guest_notes: List[str] = field(default_factory=list)
    has_review: bool = False
    is_consecutive_stay: bool = False
    is_first_booking_of_stay: bool = True
    previous_stay: Optional[PreviousStay] = None
    guest_details: Optional[GuestDetails] = None
    expenses: List[BookingExpense] = field(default_factory=list)

    @property
    def total_expenses(self) -> float:
        return sum(e.amount for e in self.expenses)
