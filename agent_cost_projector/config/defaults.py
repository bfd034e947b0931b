"""
Built-in projection inputs.

The seven-stage rollout plan runs from an HQ pilot to near-complete
enterprise coverage over 31 months.
"""

from agent_cost_projector.core.agents import Agent, Segment
from agent_cost_projector.core.pricing import UsageParameters
from agent_cost_projector.core.stages import AdoptionStage, Phase


DEFAULT_STAGES = (
    AdoptionStage("Pilot (HQ)", month=1, users=130, dau=0.45, phase=Phase.PILOT),
    AdoptionStage("HQ Expansion", month=4, users=500, dau=0.40, phase=Phase.EXPANSION),
    AdoptionStage("Full HQ", month=7, users=1000, dau=0.38, phase=Phase.EXPANSION),
    AdoptionStage("HQ + Mgmt", month=10, users=2500, dau=0.35, phase=Phase.MANAGEMENT),
    AdoptionStage("All Mgmt", month=13, users=6000, dau=0.33, phase=Phase.MANAGEMENT),
    AdoptionStage("Mgmt + Stores", month=19, users=12000, dau=0.30, phase=Phase.STORES),
    AdoptionStage("Near-Complete", month=31, users=30000, dau=0.28, phase=Phase.ENTERPRISE),
)

DEFAULT_USAGE = UsageParameters()

DEFAULT_AGENTS = (
    Agent(
        agent_id=1,
        name="HR Policy Assistant",
        purpose="Answers leave, payroll and policy questions",
        conversations_per_day=2,
        turns_per_conversation=4,
        generative_ratio=0.6,
        actions_per_conversation=0.5,
        deploy_month=1,
        segments=frozenset({Segment.ALL}),
    ),
    Agent(
        agent_id=2,
        name="Manager Insights",
        purpose="Summarises team performance and store KPIs",
        conversations_per_day=3,
        turns_per_conversation=6,
        generative_ratio=0.8,
        actions_per_conversation=1,
        tenant_grounding=True,
        deploy_month=10,
        segments=frozenset({Segment.MANAGEMENT}),
    ),
    Agent(
        agent_id=3,
        name="Finance Close Helper",
        purpose="Guides HQ finance staff through month-end close",
        conversations_per_day=1,
        turns_per_conversation=5,
        generative_ratio=0.7,
        actions_per_conversation=2,
        deploy_month=4,
        segments=frozenset({Segment.HQ}),
    ),
)

DEFAULT_MONTHLY = {
    "user_count": 1300,
    "complexity_ratio": "80/20",
    "simple_credits_per_user": 75,
    "complex_credits_per_user": 600,
    "year1_growth_rate": 15,
    "adoption_ceiling": 80,
    "steady_state_adoption": 60,
}

DEFAULT_SCENARIOS = {
    "user_counts": (1300, 5000, 30000),
    "agent_counts": (10, 30, 100),
    "complexity_ratios": ("80/20", "70/30", "50/50"),
}

DEFAULT_ROLLOUT = {
    "hybrid_seat_users": 200,
    "autonomous_action_ratio": 0.15,
}

DEFAULT_FLAT_SEAT_PRICE = 30
