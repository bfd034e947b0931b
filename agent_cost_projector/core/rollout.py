"""
Deployment-stage rollout projection.

Projects 36 months of staged adoption and prices the resulting usage
under five strategies side by side:

1. PAYG alone - every credit billed pay-as-you-go
2. P3 pre-purchase - every credit billed at the prepaid discount
3. PAYG + seat licenses - some users on seats, the rest on PAYG
4. P3 + seat licenses - as 3, with usage billed at the prepaid discount
5. Seat licenses for all - every user on a seat, no usage charges

Seat-licensed users in the hybrid models still pay for the autonomous
share of their actions.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Sequence, Tuple

from .adoption import year_label
from .agents import Agent
from .breakpoint import LicensingBreakpoint, find_licensing_breakpoint
from .pricing import (
    CREDIT_MODEL,
    DEFAULT_PRICING,
    PricingConstants,
    UsageParameters,
    calculate_payg_cost,
    calculate_prepaid_cost,
    round_half_up,
)
from .stages import AdoptionStage, Phase, validate_stages
from .timeline import (
    ROLLOUT_MONTHS,
    WORKING_DAYS_PER_MONTH,
    NO_USAGE,
    TimelineMonth,
    agent_month_usage,
    build_timeline,
)
from .validation import DuplicateAgentError, NumericRange


SEAT_USERS_RANGE = NumericRange(0, 10_000_000)
AUTONOMOUS_RATIO_RANGE = NumericRange(0, 1)


class PricingModel(Enum):
    """The five pricing strategies, valued by their label."""
    PAYG = "PAYG Alone"
    P3 = "P3 Pre-Purchase"
    PAYG_SEAT = "PAYG + Seat Licenses"
    P3_SEAT = "P3 + Seat Licenses"
    SEAT_ALL = "Seat Licenses for All"


# RolloutMonth field holding each model's monthly cost
MODEL_COST_FIELDS = {
    PricingModel.PAYG: "payg_cost",
    PricingModel.P3: "p3_cost",
    PricingModel.PAYG_SEAT: "payg_seat_cost",
    PricingModel.P3_SEAT: "p3_seat_cost",
    PricingModel.SEAT_ALL: "seat_all_cost",
}


@dataclass(frozen=True)
class RolloutMonth:
    """One month of the rollout projection."""
    month: int
    year: str
    users: int
    dau: float
    dau_percent: float
    phase: Phase
    multiplier: float
    active_users: int
    conversations: int
    credits: int
    action_volume: float
    payg_cost: int
    p3_cost: int
    payg_seat_cost: int
    p3_seat_cost: int
    seat_all_cost: int

    def cost_for(self, model: PricingModel) -> int:
        return getattr(self, MODEL_COST_FIELDS[model])


@dataclass(frozen=True)
class AgentMonthCost:
    agent_id: int
    name: str
    credits: float
    cost: float


@dataclass(frozen=True)
class AgentMonthlyCosts:
    """PAYG cost of every agent in one month."""
    month: int
    per_agent: Tuple[AgentMonthCost, ...]
    total_cost: float


@dataclass(frozen=True)
class AgentCostSummary:
    """3-year PAYG cost of one agent."""
    agent_id: int
    name: str
    year1: float
    year2: float
    year3: float
    total: float


@dataclass(frozen=True)
class PricingModelSummary:
    """3-year cost of one pricing model."""
    model: PricingModel
    year1: int
    year2: int
    year3: int
    total: int

    @property
    def label(self) -> str:
        return self.model.value


@dataclass(frozen=True)
class RolloutProjection:
    """Everything the rollout projector produces."""
    monthly: Tuple[RolloutMonth, ...]
    agent_monthly_costs: Tuple[AgentMonthlyCosts, ...]
    agent_summaries: Tuple[AgentCostSummary, ...]
    pricing_summary: Tuple[PricingModelSummary, ...]
    cheapest_model: PricingModelSummary
    breakpoint: LicensingBreakpoint


@dataclass(frozen=True)
class _ModelCosts:
    payg: float
    p3: float
    payg_seat: float
    p3_seat: float
    seat_all: float


def _resolve_pricing(
    pricing: Optional[PricingConstants],
    flat_seat_price: Optional[float]
) -> PricingConstants:
    """Base rates with the seat price override applied and clamped."""
    pricing = pricing or DEFAULT_PRICING
    if flat_seat_price is None:
        flat_seat_price = pricing.flat_seat_price
    return pricing.with_seat_price(flat_seat_price)


def _check_unique_ids(agents: Sequence[Agent]) -> None:
    seen = set()
    for agent in agents:
        if agent.agent_id in seen:
            raise DuplicateAgentError(f"Duplicate agent id {agent.agent_id} in portfolio")
        seen.add(agent.agent_id)


def _price_month(
    users: int,
    credits: float,
    seat_users: int,
    hybrid_usage_credits: float,
    pricing: PricingConstants
) -> _ModelCosts:
    """Cost of one month's usage under all five models."""
    seat_fees = seat_users * pricing.flat_seat_price
    return _ModelCosts(
        payg=calculate_payg_cost(credits, pricing),
        p3=calculate_prepaid_cost(credits, pricing),
        payg_seat=seat_fees + calculate_payg_cost(hybrid_usage_credits, pricing),
        p3_seat=seat_fees + calculate_prepaid_cost(hybrid_usage_credits, pricing),
        seat_all=users * pricing.flat_seat_price
    )


def _rollout_month(
    timeline_month: TimelineMonth,
    conversations: float,
    credits: float,
    action_volume: float,
    costs: _ModelCosts
) -> RolloutMonth:
    return RolloutMonth(
        month=timeline_month.month,
        year=year_label(timeline_month.month),
        users=timeline_month.users,
        dau=timeline_month.dau,
        dau_percent=timeline_month.dau * 100,
        phase=timeline_month.phase,
        multiplier=timeline_month.multiplier,
        active_users=timeline_month.active_users,
        conversations=round_half_up(conversations),
        credits=round_half_up(credits),
        action_volume=action_volume,
        payg_cost=round_half_up(costs.payg),
        p3_cost=round_half_up(costs.p3),
        payg_seat_cost=round_half_up(costs.payg_seat),
        p3_seat_cost=round_half_up(costs.p3_seat),
        seat_all_cost=round_half_up(costs.seat_all)
    )


def _year_totals(values: Sequence[float]) -> Tuple[float, float, float]:
    """Sum a 36-month series into Year 1, Year 2 and Year 3 buckets."""
    return sum(values[0:12]), sum(values[12:24]), sum(values[24:36])


def summarize_pricing(monthly: Sequence[RolloutMonth]) -> Tuple[PricingModelSummary, ...]:
    """3-year cost of every pricing model from the monthly series."""
    summaries = []
    for model in PricingModel:
        year1, year2, year3 = _year_totals([m.cost_for(model) for m in monthly])
        summaries.append(PricingModelSummary(
            model=model,
            year1=year1,
            year2=year2,
            year3=year3,
            total=year1 + year2 + year3
        ))
    return tuple(summaries)


def cheapest_model(summaries: Sequence[PricingModelSummary]) -> PricingModelSummary:
    """Model with the lowest 3-year total; the first listed wins a tie."""
    cheapest = summaries[0]
    for summary in summaries[1:]:
        if summary.total < cheapest.total:
            cheapest = summary
    return cheapest


def project_rollout(
    stages: Sequence[AdoptionStage],
    agents: Sequence[Agent],
    hybrid_seat_users: float,
    flat_seat_price: Optional[float] = None,
    autonomous_action_ratio: float = 0.15,
    usage: Optional[UsageParameters] = None,
    pricing: Optional[PricingConstants] = None
) -> RolloutProjection:
    """Project 36 months of staged rollout for an agent portfolio.

    Args:
        stages: Adoption stages sorted by anchor month
        agents: The agent portfolio; disabled agents cost nothing
        hybrid_seat_users: Users licensed with seats in the hybrid models
        flat_seat_price: Monthly seat price, clamped to 25-35; defaults to
            the seat price in pricing
        autonomous_action_ratio: Share of seat users' actions that run
            autonomously and are still billed as credits
        usage: Engine-wide tunables; only the peak multiplier is read here
        pricing: Base rates; a flat_seat_price argument overrides its seat price

    Returns:
        RolloutProjection with the monthly series, per-agent costs, pricing
        summary and licensing breakpoint

    Raises:
        EmptyStagesError: If no stages are given
        StageOrderError: If stage months are not strictly increasing
        DuplicateAgentError: If two agents share an id
    """
    stages = validate_stages(stages)
    usage = (usage or UsageParameters()).clamped()
    pricing = _resolve_pricing(pricing, flat_seat_price)
    seat_users_limit = SEAT_USERS_RANGE.clamp(hybrid_seat_users)
    autonomous_ratio = AUTONOMOUS_RATIO_RANGE.clamp(autonomous_action_ratio)
    agents = tuple(agent.clamped() for agent in agents)
    _check_unique_ids(agents)

    timeline = build_timeline(stages, usage)

    monthly = []
    agent_monthly_costs = []
    agent_costs: Dict[int, list] = {agent.agent_id: [] for agent in agents}

    for timeline_month in timeline:
        per_agent = []
        conversations = credits = actions = 0
        for agent in agents:
            month_usage = NO_USAGE
            if agent.enabled:
                month_usage = agent_month_usage(
                    timeline_month,
                    agent.segments,
                    agent.deploy_month,
                    agent.conversations_per_day,
                    agent.credits_per_conversation,
                    agent.actions_per_conversation
                )
            cost = calculate_payg_cost(month_usage.credits, pricing)
            per_agent.append(AgentMonthCost(
                agent_id=agent.agent_id,
                name=agent.name,
                credits=month_usage.credits,
                cost=cost
            ))
            agent_costs[agent.agent_id].append(cost)
            conversations += month_usage.conversations
            credits += month_usage.credits
            actions += month_usage.actions

        users = timeline_month.users
        seat_users = min(seat_users_limit, users)
        # With no users there is nobody on a seat; all (zero) usage is PAYG
        user_ratio = (users - seat_users) / users if users else 1
        hybrid_usage_credits = (
            credits * user_ratio
            + actions * (1 - user_ratio) * autonomous_ratio * CREDIT_MODEL.action
        )

        costs = _price_month(users, credits, seat_users, hybrid_usage_credits, pricing)
        monthly.append(_rollout_month(timeline_month, conversations, credits, actions, costs))
        agent_monthly_costs.append(AgentMonthlyCosts(
            month=timeline_month.month,
            per_agent=tuple(per_agent),
            total_cost=sum(entry.cost for entry in per_agent)
        ))

    agent_summaries = []
    for agent in agents:
        year1, year2, year3 = _year_totals(agent_costs[agent.agent_id])
        agent_summaries.append(AgentCostSummary(
            agent_id=agent.agent_id,
            name=agent.name,
            year1=round_half_up(year1, 2),
            year2=round_half_up(year2, 2),
            year3=round_half_up(year3, 2),
            total=round_half_up(year1 + year2 + year3, 2)
        ))

    pricing_summary = summarize_pricing(monthly)
    totals = {summary.model: summary.total for summary in pricing_summary}
    licensing_breakpoint = find_licensing_breakpoint(
        agents,
        timeline,
        payg_total=totals[PricingModel.PAYG],
        seat_total=totals[PricingModel.SEAT_ALL],
        pricing=pricing
    )

    return RolloutProjection(
        monthly=tuple(monthly),
        agent_monthly_costs=tuple(agent_monthly_costs),
        agent_summaries=tuple(agent_summaries),
        pricing_summary=pricing_summary,
        cheapest_model=cheapest_model(pricing_summary),
        breakpoint=licensing_breakpoint
    )


def project_workload_rollout(
    stages: Sequence[AdoptionStage],
    usage: UsageParameters,
    hybrid_seat_users: float,
    flat_seat_price: Optional[float] = None,
    autonomous_action_ratio: float = 0.15,
    pricing: Optional[PricingConstants] = None
) -> Tuple[RolloutMonth, ...]:
    """Project 36 months of staged rollout for a single uniform workload.

    Every active user runs the same workload described by the usage
    parameters, on working days only. Seat-licensed and PAYG users are
    split by head count before the DAU fraction is applied.

    Raises:
        EmptyStagesError: If no stages are given
        StageOrderError: If stage months are not strictly increasing
    """
    stages = validate_stages(stages)
    usage = usage.clamped()
    pricing = _resolve_pricing(pricing, flat_seat_price)
    seat_users_limit = SEAT_USERS_RANGE.clamp(hybrid_seat_users)
    autonomous_ratio = AUTONOMOUS_RATIO_RANGE.clamp(autonomous_action_ratio)
    credits_per_conversation = usage.credits_per_conversation

    def conversations_for(active_users: int, multiplier: float) -> float:
        return (
            active_users * usage.conversations_per_user_per_day
            * WORKING_DAYS_PER_MONTH * multiplier
        )

    monthly = []
    for timeline_month in build_timeline(stages, usage, ROLLOUT_MONTHS):
        users = timeline_month.users
        multiplier = timeline_month.multiplier
        conversations = conversations_for(timeline_month.active_users, multiplier)
        credits = conversations * credits_per_conversation

        seat_users = min(seat_users_limit, users)
        seat_conversations = conversations_for(
            round_half_up(seat_users * timeline_month.dau), multiplier
        )
        payg_conversations = conversations_for(
            round_half_up((users - seat_users) * timeline_month.dau), multiplier
        )
        hybrid_usage_credits = (
            seat_conversations * usage.actions_per_conversation
            * autonomous_ratio * CREDIT_MODEL.action
            + payg_conversations * credits_per_conversation
        )

        costs = _price_month(users, credits, seat_users, hybrid_usage_credits, pricing)
        monthly.append(_rollout_month(
            timeline_month,
            conversations,
            credits,
            conversations * usage.actions_per_conversation,
            costs
        ))

    return tuple(monthly)
