from dataclasses import replace

import pytest

from core.expenses import PropertyRates, RateTable, build_expenses
from core.models import EXPENSE_CATEGORIES
from parsers.lodgify import normalize_row

ALOHA = "ALOHA • Garden + Rooftop View Marbella Stay"
WELCOME = {
    "Management-Wine", "Management-Coffee", "Management-Water",
    "Management-Tea", "Management-Slippers",
}


def _booking(make_row, consecutive=False, **row):
    b = normalize_row(make_row(**row))
    return replace(b, is_consecutive_stay=consecutive, is_first_booking_of_stay=not consecutive)


def _by_category(expenses):
    return {e.category: e for e in expenses}


def test_marbella_old_town_full_ledger(make_row):
    b = _booking(make_row, Id="42", HouseName="Marbella Old Town", TotalAmount="1000", People="2")
    ledger = _by_category(build_expenses(b))

    assert ledger["Management-Transaction"].amount == pytest.approx(13.00)
    assert ledger["Management-Commission"].amount == pytest.approx(220.00)
    assert ledger["Management-VAT"].amount == pytest.approx(46.20)
    assert ledger["Cleaning"].amount == pytest.approx(90.00)
    assert ledger["Management-Wine"].amount == pytest.approx(2.00)
    assert ledger["Management-Coffee"].amount == pytest.approx(0.60)
    assert ledger["Management-Water"].amount == pytest.approx(0.72)
    assert ledger["Management-Tea"].amount == pytest.approx(0.60)
    assert ledger["Management-Slippers"].amount == pytest.approx(1.20)
    assert "Other" not in ledger
    assert ledger["Management-Commission"].description == "Management commission (22%)"


def test_ledger_order_and_ids(make_row):
    b = _booking(make_row, Id="42", HouseName="Marbella Old Town")
    expenses = build_expenses(b)
    assert [e.id for e in expenses] == [
        "transaction-42", "commission-42", "vat-42", "cleaning-42",
        "welcome-wine-42", "welcome-coffee-42", "welcome-water-42",
        "welcome-tea-42", "welcome-slippers-42",
    ]
    assert all(e.date == "2025-01-01" for e in expenses)


def test_aloha_ld_commission(make_row):
    b = _booking(make_row, Id="7", HouseName=ALOHA, TotalAmount="500")
    ledger = _by_category(build_expenses(b))
    assert ledger["Cleaning"].amount == pytest.approx(100.0)
    assert ledger["Other"].amount == pytest.approx(60.0)
    assert ledger["Other"].id == "ld-commission-7"
    assert ledger["Management-Commission"].amount == pytest.approx(90.0)


def test_aloha_consecutive_ld_commission_without_cleaning(make_row):
    b = _booking(make_row, consecutive=True, HouseName=ALOHA, TotalAmount="500")
    ledger = _by_category(build_expenses(b))
    assert "Cleaning" not in ledger
    assert ledger["Other"].amount == pytest.approx(75.0)


def test_consecutive_stay_has_no_cleaning_nor_welcome(make_row):
    b = _booking(make_row, consecutive=True, HouseName="Marbella Old Town")
    categories = {e.category for e in build_expenses(b)}
    assert categories == {"Management-Transaction", "Management-Commission", "Management-VAT"}


def test_unknown_property_defaults(make_row):
    b = _booking(make_row, HouseName="Villa Nueva", TotalAmount="100")
    ledger = _by_category(build_expenses(b))
    assert ledger["Management-Commission"].amount == pytest.approx(18.0)
    assert ledger["Management-Commission"].description == "Management commission (18%)"
    assert "Cleaning" not in ledger


def test_zero_total_omits_management_entries(make_row):
    b = _booking(make_row, HouseName="Playa de la Fontanilla Marbella", TotalAmount="0")
    categories = [e.category for e in build_expenses(b)]
    assert "Management-Transaction" not in categories
    assert "Management-Commission" not in categories
    assert "Management-VAT" not in categories
    assert "Cleaning" in categories
    assert "Management-Wine" in categories


def test_custom_rate_table(make_row):
    rates = RateTable(
        transaction_fee_rate=0.02,
        properties={"House A": PropertyRates(cleaning_fee=50.0, commission_rate=0.10)},
        welcome_wine=0.0,
        welcome_per_guest={"coffee": 1.0},
    )
    b = _booking(make_row, TotalAmount="200", People="3")
    ledger = _by_category(build_expenses(b, rates))
    assert ledger["Management-Transaction"].amount == pytest.approx(4.0)
    assert ledger["Management-Commission"].amount == pytest.approx(20.0)
    assert ledger["Cleaning"].amount == pytest.approx(50.0)
    assert ledger["Management-Coffee"].amount == pytest.approx(3.0)
    assert "Management-Wine" not in ledger
    assert "Management-Tea" not in ledger


@pytest.mark.parametrize("house", ["Marbella Old Town", ALOHA, "Jardines Tropicales-Puerto Banús", "Unknown"])
@pytest.mark.parametrize("people", [1, 2, 5])
@pytest.mark.parametrize("consecutive", [False, True])
def test_ledger_properties(make_row, house, people, consecutive):
    b = _booking(make_row, consecutive=consecutive, HouseName=house,
                 TotalAmount="731,40", People=str(people))
    expenses = build_expenses(b)
    categories = [e.category for e in expenses]
    ledger = _by_category(expenses)

    for cat in ("Management-Transaction", "Management-Commission", "Management-VAT"):
        assert categories.count(cat) == 1
    assert ledger["Management-VAT"].amount == pytest.approx(ledger["Management-Commission"].amount * 0.21)

    if consecutive:
        assert "Cleaning" not in ledger
        assert not WELCOME & set(categories)
    else:
        assert ledger["Management-Coffee"].amount == pytest.approx(0.30 * people)
        assert ledger["Management-Water"].amount == pytest.approx(0.36 * people)
        assert ledger["Management-Tea"].amount == pytest.approx(0.30 * people)
        assert ledger["Management-Slippers"].amount == pytest.approx(0.60 * people)
        assert ledger["Management-Wine"].amount == pytest.approx(2.00)

    assert all(e.amount > 0 for e in expenses)
    assert set(categories) <= set(EXPENSE_CATEGORIES)
    assert len({e.id for e in expenses}) == len(expenses)
