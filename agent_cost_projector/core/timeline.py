"""
Month-by-month rollout timeline.

Resolves the stage plan into per-month users, DAU, phase and peak
multiplier, and works out how much a single agent consumes in a month.
Shared by the rollout projector and the licensing breakpoint search.
"""

from dataclasses import dataclass
from typing import FrozenSet, Sequence, Tuple

from .agents import eligible_users
from .pricing import UsageParameters, round_half_up
from .stages import AdoptionStage, Phase, current_phase, interpolate


ROLLOUT_MONTHS = 36
PEAK_MONTH_INTERVAL = 6

# Per-agent costing bills every calendar day; the single-workload model
# only counts working days
AGENT_DAYS_PER_MONTH = 30
WORKING_DAYS_PER_MONTH = 22


@dataclass(frozen=True)
class TimelineMonth:
    """Resolved rollout state for one month."""
    month: int
    users: int
    dau: float
    phase: Phase
    multiplier: float

    @property
    def active_users(self) -> int:
        return round_half_up(self.users * self.dau)


@dataclass(frozen=True)
class AgentMonthUsage:
    """What one agent consumes in one month."""
    active_users: int
    conversations: float
    credits: float
    actions: float


NO_USAGE = AgentMonthUsage(active_users=0, conversations=0, credits=0, actions=0)


def build_timeline(
    stages: Sequence[AdoptionStage],
    usage: UsageParameters,
    months: int = ROLLOUT_MONTHS
) -> Tuple[TimelineMonth, ...]:
    """Resolve validated stages into one entry per month.

    Every sixth month is a peak month and uses the usage peak multiplier.
    """
    timeline = []
    for month in range(1, months + 1):
        is_peak = month % PEAK_MONTH_INTERVAL == 0
        timeline.append(TimelineMonth(
            month=month,
            users=round_half_up(interpolate(month, stages, lambda s: s.users)),
            dau=interpolate(month, stages, lambda s: s.dau),
            phase=current_phase(month, stages),
            multiplier=usage.peak_multiplier if is_peak else 1.0
        ))
    return tuple(timeline)


def agent_month_usage(
    timeline_month: TimelineMonth,
    segments: FrozenSet,
    deploy_month: int,
    conversations_per_day: float,
    credits_per_conversation: float,
    actions_per_conversation: float = 0
) -> AgentMonthUsage:
    """Usage of one agent in one month.

    Agents consume nothing before their deploy month.
    """
    if timeline_month.month < deploy_month:
        return NO_USAGE

    eligible = eligible_users(segments, timeline_month.phase, timeline_month.users)
    active_users = round_half_up(eligible * timeline_month.dau)
    conversations = (
        active_users * conversations_per_day * AGENT_DAYS_PER_MONTH * timeline_month.multiplier
    )
    return AgentMonthUsage(
        active_users=active_users,
        conversations=conversations,
        credits=conversations * credits_per_conversation,
        actions=conversations * actions_per_conversation
    )
