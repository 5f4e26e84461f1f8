"""
Registro spese per prenotazione.

Voci generate (in quest'ordine):
  - Management-Transaction  totale × 1,3%
  - Management-Commission   totale × 22% (Marbella Old Town) o 18%
  - Management-VAT          commissione × 21%
  - Cleaning                tariffa fissa per proprietà, esclusi i soggiorni consecutivi
  - Other (L&D)             (totale − pulizie) × 15%, solo ALOHA
  - Management-Wine         2,00 una tantum
  - Management-Coffee/Water/Tea/Slippers   tariffa × ospiti

Il welcome package si applica solo alla prima prenotazione di un soggiorno.
Le voci con importo zero non vengono registrate.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.models import Booking, BookingExpense
import config

logger = logging.getLogger(__name__)


@dataclass
class PropertyRates:
    cleaning_fee: float = 0.0
    commission_rate: float = config.DEFAULT_COMMISSION_RATE
    ld_commission_rate: Optional[float] = None


@dataclass
class RateTable:
    """Tariffe applicate dal generatore, per default quelle di config.py."""
    transaction_fee_rate: float = config.TRANSACTION_FEE_RATE
    vat_rate: float = config.VAT_RATE
    default_commission_rate: float = config.DEFAULT_COMMISSION_RATE
    properties: Dict[str, PropertyRates] = field(default_factory=dict)
    welcome_wine: float = config.WELCOME_WINE
    welcome_per_guest: Dict[str, float] = field(
        default_factory=lambda: dict(config.WELCOME_PER_GUEST)
    )

    @classmethod
    def from_config(cls) -> "RateTable":
        return cls(
            properties={
                name: PropertyRates(
                    cleaning_fee=r.get("cleaning_fee", 0.0),
                    commission_rate=r.get("commission_rate", config.DEFAULT_COMMISSION_RATE),
                    ld_commission_rate=r.get("ld_commission_rate"),
                )
                for name, r in config.PROPERTY_RATES.items()
            }
        )

    def for_property(self, house_name: str) -> PropertyRates:
        rates = self.properties.get(house_name)
        if rates is None:
            logger.debug("Proprietà senza tariffe: %r, uso i default", house_name)
            return PropertyRates(commission_rate=self.default_commission_rate)
        return rates

    def is_known(self, house_name: str) -> bool:
        return house_name in self.properties


# (chiave tariffa, categoria, prefisso id, descrizione) per le voci a ospite
_WELCOME_ITEMS = [
    ("coffee", "Management-Coffee", "welcome-coffee", "Coffee capsules ({n} guests, one-time)"),
    ("water", "Management-Water", "welcome-water", "Water bottles ({n} guests, one-time)"),
    ("tea", "Management-Tea", "welcome-tea", "Tea bags ({n} guests, one-time)"),
    ("slippers", "Management-Slippers", "welcome-slippers", "Guest slippers ({n} pairs, one-time)"),
]


def _pct(rate: float) -> str:
    return f"{rate * 100:g}%"


def build_expenses(booking: Booking, rates: RateTable = None) -> List[BookingExpense]:
    """
    Calcola il registro spese di una prenotazione già marcata
    (is_consecutive_stay / is_first_booking_of_stay).
    """
    if rates is None:
        rates = RateTable.from_config()

    prop = rates.for_property(booking.house_name)
    total = booking.total_amount
    expenses: List[BookingExpense] = []

    def add(prefix: str, category: str, amount: float, description: str):
        if amount:
            expenses.append(BookingExpense(
                id=f"{prefix}-{booking.id}",
                category=category,
                amount=amount,
                description=description,
                date=booking.date_arrival,
            ))

    if total > 0:
        commission = total * prop.commission_rate
        add("transaction", "Management-Transaction",
            total * rates.transaction_fee_rate,
            f"Payment processing fee ({_pct(rates.transaction_fee_rate)})")
        add("commission", "Management-Commission", commission,
            f"Management commission ({_pct(prop.commission_rate)})")
        add("vat", "Management-VAT", commission * rates.vat_rate,
            f"VAT on commission ({_pct(rates.vat_rate)})")

    # Nessuna pulizia tra due prenotazioni consecutive dello stesso ospite
    cleaning_fee = 0.0 if booking.is_consecutive_stay else prop.cleaning_fee
    add("cleaning", "Cleaning", cleaning_fee, "Professional cleaning service")

    if prop.ld_commission_rate and total > 0:
        ld_commission = (total - cleaning_fee) * prop.ld_commission_rate
        if ld_commission > 0:
            add("ld-commission", "Other", ld_commission,
                f"L&D Guest Commission ({_pct(prop.ld_commission_rate)})")

    if booking.is_first_booking_of_stay:
        add("welcome-wine", "Management-Wine", rates.welcome_wine,
            "Welcome wine (one-time)")
        for key, category, prefix, description in _WELCOME_ITEMS:
            rate = rates.welcome_per_guest.get(key, 0.0)
            add(prefix, category, rate * booking.people,
                description.format(n=booking.people))

    return expenses
