"""
Agent portfolio and segment eligibility.

Agents are plain immutable records. The caller owns the portfolio and
passes it into every projection; the functions here return new tuples
rather than mutating anything.
"""

from collections import Counter
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import FrozenSet, Iterable, Optional, Sequence, Tuple

from .pricing import CREDIT_MODEL, UsageParameters, round_half_up
from .stages import Phase
from .validation import AgentValidationError, NumericRange


class Segment(Enum):
    """Organisational group an agent is offered to."""
    HQ = "HQ"
    MANAGEMENT = "Management"
    STORES = "Stores"
    ALL = "All"


# Share of the rollout audience an agent reaches when its segment is only
# partly onboarded in the current phase
MANAGEMENT_EXPANSION_SHARE = 0.4
HQ_WIDE_ROLLOUT_SHARE = 0.15

AGENT_RANGES = {
    "conversations_per_day": NumericRange(0, 50),
    "turns_per_conversation": NumericRange(0, 50),
    "generative_ratio": NumericRange(0, 1),
    "actions_per_conversation": NumericRange(0, 20),
}
DEPLOY_MONTH_RANGE = NumericRange(1, 120)


@dataclass(frozen=True)
class Agent:
    """A workload with its own usage intensity and audience."""
    agent_id: int
    name: str
    conversations_per_day: float
    turns_per_conversation: float
    generative_ratio: float
    actions_per_conversation: float
    tenant_grounding: bool = False
    deploy_month: int = 1
    segments: FrozenSet[Segment] = field(default_factory=lambda: frozenset({Segment.ALL}))
    enabled: bool = True
    purpose: str = ""

    @property
    def credits_per_conversation(self) -> float:
        return CREDIT_MODEL.credits_per_conversation(
            self.turns_per_conversation,
            self.generative_ratio,
            self.actions_per_conversation,
            self.tenant_grounding
        )

    def clamped(self) -> "Agent":
        """Return a copy with numeric fields forced into range."""
        changes = {
            name: AGENT_RANGES[name].clamp(getattr(self, name))
            for name in AGENT_RANGES
        }
        changes["deploy_month"] = int(DEPLOY_MONTH_RANGE.clamp(self.deploy_month))
        changes["segments"] = frozenset(self.segments)
        return replace(self, **changes)


@dataclass(frozen=True)
class AverageAgent:
    """A synthetic agent representing the typical enabled agent."""
    credits_per_conversation: float
    conversations_per_day: float
    deploy_month: int
    segments: FrozenSet[Segment]


def eligible_users(segments: Iterable[Segment], phase: Phase, users: float) -> float:
    """Users an agent can reach in the given rollout phase.

    Args:
        segments: The agent's eligible segments
        phase: Current rollout phase
        users: Interpolated total users for the month

    Returns:
        Eligible user count (may be fractional)
    """
    segments = set(segments)
    if Segment.ALL in segments or Segment.STORES in segments:
        return users
    if Segment.MANAGEMENT in segments:
        if phase in (Phase.MANAGEMENT, Phase.STORES, Phase.ENTERPRISE):
            return users
        if phase == Phase.EXPANSION:
            return users * MANAGEMENT_EXPANSION_SHARE
        return 0
    if Segment.HQ in segments:
        if phase in (Phase.PILOT, Phase.EXPANSION):
            return users
        return users * HQ_WIDE_ROLLOUT_SHARE
    return 0


def validate_agent_form(name: str, purpose: str) -> None:
    """Reject an agent form without a name or purpose.

    Raises:
        AgentValidationError: If either field is blank
    """
    if not name or not name.strip():
        raise AgentValidationError("Agent name is required and cannot be empty")
    if not purpose or not purpose.strip():
        raise AgentValidationError("Agent purpose is required and cannot be empty")


def next_agent_id(agents: Sequence[Agent]) -> int:
    """Next free identifier: one more than the largest in use."""
    return max((agent.agent_id for agent in agents), default=0) + 1


def add_agent(
    agents: Sequence[Agent],
    name: str,
    purpose: str,
    usage: Optional[UsageParameters] = None,
    **overrides
) -> Tuple[Agent, ...]:
    """Return the portfolio with a new agent appended.

    Usage fields not given in overrides are seeded from the usage parameters.

    Raises:
        AgentValidationError: If name or purpose is blank
    """
    validate_agent_form(name, purpose)
    usage = (usage or UsageParameters()).clamped()

    fields = {
        "conversations_per_day": usage.conversations_per_user_per_day,
        "turns_per_conversation": usage.turns_per_conversation,
        "generative_ratio": usage.generative_ratio,
        "actions_per_conversation": usage.actions_per_conversation,
        "tenant_grounding": usage.tenant_grounding,
    }
    fields.update(overrides)

    agent = Agent(
        agent_id=next_agent_id(agents),
        name=name.strip(),
        purpose=purpose.strip(),
        **fields
    ).clamped()
    return tuple(agents) + (agent,)


def update_agent(agents: Sequence[Agent], agent_id: int, **changes) -> Tuple[Agent, ...]:
    """Return the portfolio with one agent edited.

    Raises:
        KeyError: If no agent has the id
        AgentValidationError: If the edit blanks the name or purpose
    """
    if "agent_id" in changes:
        raise ValueError("agent_id cannot be changed")

    updated = []
    found = False
    for agent in agents:
        if agent.agent_id == agent_id:
            agent = replace(agent, **changes)
            validate_agent_form(agent.name, agent.purpose)
            agent = agent.clamped()
            found = True
        updated.append(agent)

    if not found:
        raise KeyError(f"Unknown agent id: {agent_id}")
    return tuple(updated)


def remove_agent(agents: Sequence[Agent], agent_id: int) -> Tuple[Agent, ...]:
    """Return the portfolio without one agent.

    Raises:
        KeyError: If no agent has the id
    """
    remaining = tuple(agent for agent in agents if agent.agent_id != agent_id)
    if len(remaining) == len(agents):
        raise KeyError(f"Unknown agent id: {agent_id}")
    return remaining


def average_agent(agents: Sequence[Agent]) -> Optional[AverageAgent]:
    """Build the typical agent from the enabled agents.

    Averages credits per conversation, conversations per day and deploy
    month; takes the most common segment, ties going to the first seen.

    Returns:
        None when no agent is enabled
    """
    enabled = [agent for agent in agents if agent.enabled]
    if not enabled:
        return None

    count = len(enabled)
    segment_counts = Counter(
        segment
        for agent in enabled
        for segment in sorted(agent.segments, key=_segment_order)
    )
    segments = frozenset()
    if segment_counts:
        segments = frozenset({segment_counts.most_common(1)[0][0]})

    return AverageAgent(
        credits_per_conversation=sum(a.credits_per_conversation for a in enabled) / count,
        conversations_per_day=sum(a.conversations_per_day for a in enabled) / count,
        deploy_month=round_half_up(sum(a.deploy_month for a in enabled) / count),
        segments=segments
    )


def _segment_order(segment: Segment) -> int:
    return list(Segment).index(segment)
