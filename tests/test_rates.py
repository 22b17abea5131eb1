"""Tests for rate and travel resolution."""

import pytest
from decimal import Decimal

from hours_tool.engine.rates import ZERO_RATES, RateBook
from hours_tool.models import NO_TRAVEL, RateAgreement, TravelAgreement


def _make_rate(tech="T1", hourly="20", billable="50", saturday=None, sunday=None) -> RateAgreement:
    return RateAgreement(
        technician_id=tech,
        hourly_rate=Decimal(hourly),
        billable_rate=Decimal(billable),
        saturday_rate=Decimal(saturday) if saturday is not None else None,
        sunday_rate=Decimal(sunday) if sunday is not None else None,
    )


def _make_travel(customer="C1", tech="T1", to_tech="10", from_client="25") -> TravelAgreement:
    return TravelAgreement(
        customer_id=customer,
        technician_id=tech,
        to_technician=Decimal(to_tech),
        from_client=Decimal(from_client),
    )


class TestResolveRates:
    def test_explicit_weekend_rates_used(self):
        book = RateBook([_make_rate(saturday="35", sunday="45")])
        rates = book.resolve_rates("T1")
        assert rates.hourly == Decimal("20")
        assert rates.billable == Decimal("50")
        assert rates.saturday == Decimal("35")
        assert rates.sunday == Decimal("45")

    def test_unset_weekend_rates_default_to_multiples(self):
        rates = RateBook([_make_rate()]).resolve_rates("T1")
        assert rates.saturday == Decimal("30")
        assert rates.sunday == Decimal("40")

    def test_zero_weekend_rates_treated_as_unset(self):
        rates = RateBook([_make_rate(saturday="0", sunday="0")]).resolve_rates("T1")
        assert rates.saturday == Decimal("30")
        assert rates.sunday == Decimal("40")

    def test_missing_agreement_resolves_to_zero(self):
        rates = RateBook([_make_rate()]).resolve_rates("UNKNOWN")
        assert rates == ZERO_RATES

    def test_later_agreement_wins(self):
        book = RateBook([_make_rate(hourly="20"), _make_rate(hourly="22")])
        assert len(book) == 1
        assert book.resolve_rates("T1").hourly == Decimal("22")

    def test_negative_rate_rejected(self):
        with pytest.raises(ValueError, match="hourly_rate"):
            _make_rate(hourly="-1")


class TestResolveTravel:
    def test_agreement_found(self):
        book = RateBook(travel=[_make_travel()])
        charge = book.resolve_travel("C1", "T1")
        assert charge.to_technician == Decimal("10")
        assert charge.from_client == Decimal("25")

    def test_pair_must_match(self):
        book = RateBook(travel=[_make_travel()])
        assert book.resolve_travel("C1", "T2") is NO_TRAVEL
        assert book.resolve_travel("C2", "T1") is NO_TRAVEL

    def test_no_customer_no_travel(self):
        book = RateBook(travel=[_make_travel()])
        assert book.resolve_travel(None, "T1") is NO_TRAVEL
        assert book.travel_agreement(None, "T1") is None
