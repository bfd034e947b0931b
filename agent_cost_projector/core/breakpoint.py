"""
Licensing breakpoint search.

Answers "how many more agents can we add before licensing every user
with a flat seat becomes cheaper than paying for usage?".

The search is a bounded linear scan: add one average agent at a time
and stop at the first count whose projected 3-year PAYG total reaches
the seat-for-all total. It never extrapolates past the cap.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from .agents import Agent, average_agent
from .pricing import DEFAULT_PRICING, PricingConstants
from .timeline import TimelineMonth, agent_month_usage

logger = logging.getLogger(__name__)

MAX_ADDITIONAL_AGENTS = 200


class BreakpointStatus(Enum):
    """Outcome of a breakpoint search."""
    ALREADY_EXCEEDED = "already_exceeded"
    FOUND = "found"
    NOT_WITHIN_CAP = "not_within_cap"
    NO_BASELINE_AGENTS = "no_baseline_agents"


@dataclass(frozen=True)
class LicensingBreakpoint:
    """Result of comparing PAYG-alone against seat-for-all over 3 years."""
    status: BreakpointStatus
    additional_agents: Optional[int]
    payg_total: float
    seat_total: float
    projected_payg_total: float
    incremental_cost_per_agent: float
    headroom: float
    cap: int = MAX_ADDITIONAL_AGENTS


def find_licensing_breakpoint(
    agents: Sequence[Agent],
    timeline: Sequence[TimelineMonth],
    payg_total: float,
    seat_total: float,
    pricing: PricingConstants = DEFAULT_PRICING
) -> LicensingBreakpoint:
    """Find how many average agents push PAYG-alone past seat-for-all.

    Args:
        agents: Current portfolio; only enabled agents shape the average
        timeline: Resolved rollout months
        payg_total: Current 3-year PAYG-alone total
        seat_total: 3-year seat-for-all total
        pricing: Rates used to cost the simulated agents

    Returns:
        LicensingBreakpoint describing the outcome
    """
    headroom = max(seat_total - payg_total, 0)

    if payg_total >= seat_total:
        return LicensingBreakpoint(
            status=BreakpointStatus.ALREADY_EXCEEDED,
            additional_agents=0,
            payg_total=payg_total,
            seat_total=seat_total,
            projected_payg_total=payg_total,
            incremental_cost_per_agent=0,
            headroom=0
        )

    typical = average_agent(agents)
    if typical is None:
        return LicensingBreakpoint(
            status=BreakpointStatus.NO_BASELINE_AGENTS,
            additional_agents=None,
            payg_total=payg_total,
            seat_total=seat_total,
            projected_payg_total=payg_total,
            incremental_cost_per_agent=0,
            headroom=headroom
        )

    incremental = sum(
        agent_month_usage(
            month,
            typical.segments,
            typical.deploy_month,
            typical.conversations_per_day,
            typical.credits_per_conversation
        ).credits
        for month in timeline
    ) * pricing.payg_rate
    logger.debug("Average agent adds %.2f over the projection", incremental)

    projected = payg_total
    for additional in range(1, MAX_ADDITIONAL_AGENTS + 1):
        projected = payg_total + additional * incremental
        if projected >= seat_total:
            logger.debug("Breakpoint reached at %d additional agents", additional)
            return LicensingBreakpoint(
                status=BreakpointStatus.FOUND,
                additional_agents=additional,
                payg_total=payg_total,
                seat_total=seat_total,
                projected_payg_total=projected,
                incremental_cost_per_agent=incremental,
                headroom=headroom
            )

    logger.warning(
        "No licensing breakpoint within %d additional agents", MAX_ADDITIONAL_AGENTS
    )
    return LicensingBreakpoint(
        status=BreakpointStatus.NOT_WITHIN_CAP,
        additional_agents=None,
        payg_total=payg_total,
        seat_total=seat_total,
        projected_payg_total=projected,
        incremental_cost_per_agent=incremental,
        headroom=headroom
    )
