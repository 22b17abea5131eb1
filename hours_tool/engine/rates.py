"""Rate resolution against indexed rate and travel agreements.

The book is built once per pass and handed to the pricing engine; lookups
are dictionary hits, never scans. Missing agreements are a data-quality
issue, not an error: they resolve to zero so pricing never fails.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from decimal import Decimal

from hours_tool.models import (
    NO_TRAVEL,
    ZERO,
    RateAgreement,
    ResolvedRates,
    TravelAgreement,
    TravelCharge,
)

logger = logging.getLogger(__name__)

SATURDAY_DEFAULT_FACTOR = Decimal("1.5")
SUNDAY_DEFAULT_FACTOR = Decimal("2")

ZERO_RATES = ResolvedRates(hourly=ZERO, billable=ZERO, saturday=ZERO, sunday=ZERO)


class RateBook:
    """Indexed rate and travel agreements for one pass."""

    def __init__(
        self,
        rates: Iterable[RateAgreement] = (),
        travel: Iterable[TravelAgreement] = (),
    ) -> None:
        # Later rows win, matching upsert semantics in the store
        self._rates: dict[str, RateAgreement] = {r.technician_id: r for r in rates}
        self._travel: dict[tuple[str, str], TravelAgreement] = {
            (t.customer_id, t.technician_id): t for t in travel
        }

    def __len__(self) -> int:
        return len(self._rates)

    def rate_agreement(self, technician_id: str) -> RateAgreement | None:
        return self._rates.get(technician_id)

    def travel_agreement(self, customer_id: str | None, technician_id: str) -> TravelAgreement | None:
        if customer_id is None:
            return None
        return self._travel.get((customer_id, technician_id))

    def resolve_rates(self, technician_id: str) -> ResolvedRates:
        agreement = self._rates.get(technician_id)
        if agreement is None:
            logger.debug("No rate agreement for technician %s, using zero rates", technician_id)
            return ZERO_RATES

        hourly = agreement.hourly_rate
        # Unset (or zero) weekend rates fall back to multiples of the hourly rate
        saturday = agreement.saturday_rate or hourly * SATURDAY_DEFAULT_FACTOR
        sunday = agreement.sunday_rate or hourly * SUNDAY_DEFAULT_FACTOR
        return ResolvedRates(
            hourly=hourly,
            billable=agreement.billable_rate,
            saturday=saturday,
            sunday=sunday,
        )

    def resolve_travel(self, customer_id: str | None, technician_id: str) -> TravelCharge:
        agreement = self.travel_agreement(customer_id, technician_id)
        if agreement is None:
            return NO_TRAVEL
        return TravelCharge(
            to_technician=agreement.to_technician,
            from_client=agreement.from_client,
        )
