"""
Adoption and cost projection for a fixed user base.

Projects 24 months of active users and compares pay-as-you-go billing
against flat-seat billing for every user.

Adoption grows linearly through Year 1 and is capped at the ceiling:

    adoption(m) = min(ceiling, 10 + (m - 1) * growth)

Each month recomputes from the linear base; there is no compounding.
Year 2 holds the month-12 value.
"""

import math
from dataclasses import dataclass, replace
from typing import Tuple

from .pricing import DEFAULT_PRICING, PricingConstants, round_half_up
from .validation import NumericRange, parse_complexity_ratio


MONTHLY_PROJECTION_MONTHS = 24
INITIAL_ADOPTION = 10

MONTHLY_PARAM_RANGES = {
    "user_count": NumericRange(0, 1_000_000),
    "simple_credits_per_user": NumericRange(0, 100_000),
    "complex_credits_per_user": NumericRange(0, 100_000),
    "year1_growth_rate": NumericRange(0, 100),
    "adoption_ceiling": NumericRange(0, 100),
    "steady_state_adoption": NumericRange(0, 100),
}


@dataclass(frozen=True)
class MonthlyProjectionParams:
    """Inputs to the 24-month adoption projection."""
    user_count: float
    complexity_ratio: str
    simple_credits_per_user: float
    complex_credits_per_user: float
    year1_growth_rate: float
    adoption_ceiling: float
    steady_state_adoption: float = 60
    pricing: PricingConstants = DEFAULT_PRICING

    def clamped(self) -> "MonthlyProjectionParams":
        """Return a copy with every numeric field forced into its range."""
        return replace(
            self,
            **{
                name: MONTHLY_PARAM_RANGES[name].clamp(getattr(self, name))
                for name in MONTHLY_PARAM_RANGES
            }
        )


@dataclass(frozen=True)
class AdoptionMonth:
    """One month of the adoption projection."""
    month: int
    year: str
    adoption: float
    active_users: int
    credits_per_user: float
    total_credits: float
    payg_cost: int
    packs_needed: int
    pack_cost: float
    flat_seat_cost: float
    savings: int


def year_label(month: int) -> str:
    """Label for a 1-based month: months 1-12 are Year 1, 13-24 Year 2, and so on."""
    return f"Year {(month - 1) // 12 + 1}"


def project_monthly(params: MonthlyProjectionParams) -> Tuple[AdoptionMonth, ...]:
    """Project 24 months of adoption and cost.

    Args:
        params: Projection inputs; numeric fields are clamped on entry

    Returns:
        24 records, index 0 is month 1

    Raises:
        InvalidRatioError: If the complexity ratio is malformed
    """
    params = params.clamped()
    pricing = params.pricing
    simple_fraction, complex_fraction = parse_complexity_ratio(params.complexity_ratio)

    credits_per_user = (
        params.simple_credits_per_user * simple_fraction
        + params.complex_credits_per_user * complex_fraction
    )
    flat_seat_cost = params.user_count * pricing.flat_seat_price

    records = []
    adoption = INITIAL_ADOPTION
    for month in range(1, MONTHLY_PROJECTION_MONTHS + 1):
        # Year 2 keeps the month-12 value
        if month <= 12:
            adoption = min(
                params.adoption_ceiling,
                INITIAL_ADOPTION + (month - 1) * params.year1_growth_rate
            )

        active_users = round_half_up(params.user_count * (adoption / 100))
        total_credits = active_users * credits_per_user
        payg_cost = total_credits * pricing.payg_rate
        packs_needed = math.ceil(total_credits / pricing.pack_credits)

        records.append(AdoptionMonth(
            month=month,
            year=year_label(month),
            adoption=adoption,
            active_users=active_users,
            credits_per_user=credits_per_user,
            total_credits=total_credits,
            payg_cost=round_half_up(payg_cost),
            packs_needed=packs_needed,
            pack_cost=packs_needed * pricing.pack_price,
            flat_seat_cost=flat_seat_cost,
            savings=round_half_up(flat_seat_cost - payg_cost)
        ))

    return tuple(records)
