"""
Scenario matrix generation.

Cross-product of user counts, agent counts and complexity ratios, each
evaluated at steady-state adoption over a full year.
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from .pricing import DEFAULT_PRICING, PricingConstants, round_half_up
from .validation import (
    NumericRange,
    UndefinedSavingsError,
    parse_complexity_ratio,
    validate_number,
)


USER_COUNT_RANGE = NumericRange(0, 1_000_000)
CREDITS_RANGE = NumericRange(0, 100_000)
ADOPTION_RANGE = NumericRange(0, 100)


@dataclass(frozen=True)
class ScenarioRecord:
    """Steady-state yearly costs for one scenario combination."""
    users: float
    agents: int  # label only, never enters the cost formula
    ratio: str
    active_users: int
    credits_per_user_month: int
    monthly_payg: int
    yearly_payg: int
    yearly_flat_seat: float
    savings: int
    savings_percent: int


def calculate_savings_percent(savings: float, baseline: float) -> int:
    """Savings as a whole percentage of the baseline.

    Raises:
        UndefinedSavingsError: If the baseline is zero
    """
    if baseline == 0:
        raise UndefinedSavingsError("Savings percentage is undefined for a zero cost baseline")
    return round_half_up(savings / baseline * 100)


def generate_scenarios(
    user_counts: Sequence[float],
    agent_counts: Sequence[int],
    complexity_ratios: Sequence[str],
    simple_credits_per_user: float,
    complex_credits_per_user: float,
    steady_state_adoption: float,
    pricing: Optional[PricingConstants] = None
) -> Tuple[ScenarioRecord, ...]:
    """Evaluate every user-count x agent-count x ratio combination.

    Iteration order is users (outer), agents (middle), ratios (inner).
    The agent count is carried as a label and does not change cost.

    Args:
        user_counts: Total user counts to evaluate
        agent_counts: Agent count labels
        complexity_ratios: "S/C" simple/complex ratios
        simple_credits_per_user: Monthly credits for a simple-usage user
        complex_credits_per_user: Monthly credits for a complex-usage user
        steady_state_adoption: Percentage of users active at steady state
        pricing: Rates; defaults to the standard price list

    Returns:
        len(user_counts) * len(agent_counts) * len(complexity_ratios) records

    Raises:
        InvalidRatioError: If a complexity ratio is malformed
        UndefinedSavingsError: If a user count of zero leaves no seat baseline
    """
    pricing = pricing or DEFAULT_PRICING
    simple_credits = CREDITS_RANGE.clamp(simple_credits_per_user)
    complex_credits = CREDITS_RANGE.clamp(complex_credits_per_user)
    adoption = ADOPTION_RANGE.clamp(steady_state_adoption)

    # Parse every ratio up front so a bad one fails before any work is done
    fractions = [parse_complexity_ratio(ratio) for ratio in complexity_ratios]

    results = []
    for raw_users in user_counts:
        users = validate_number(raw_users, USER_COUNT_RANGE.min, USER_COUNT_RANGE.max)
        active_users = round_half_up(users * (adoption / 100))
        yearly_flat_seat = users * pricing.flat_seat_price * 12

        for agents in agent_counts:
            for ratio, (simple_fraction, complex_fraction) in zip(complexity_ratios, fractions):
                credits_per_user = (
                    simple_credits * simple_fraction + complex_credits * complex_fraction
                )
                monthly_credits = active_users * credits_per_user
                yearly_payg = monthly_credits * 12 * pricing.payg_rate
                savings = yearly_flat_seat - yearly_payg

                results.append(ScenarioRecord(
                    users=users,
                    agents=agents,
                    ratio=ratio,
                    active_users=active_users,
                    credits_per_user_month=round_half_up(credits_per_user),
                    monthly_payg=round_half_up(monthly_credits * pricing.payg_rate),
                    yearly_payg=round_half_up(yearly_payg),
                    yearly_flat_seat=yearly_flat_seat,
                    savings=round_half_up(savings),
                    savings_percent=calculate_savings_percent(savings, yearly_flat_seat)
                ))

    return tuple(results)
