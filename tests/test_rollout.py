"""
Tests for the deployment-stage rollout projector.
"""

import pytest

from agent_cost_projector.config.defaults import DEFAULT_AGENTS, DEFAULT_STAGES
from agent_cost_projector.core.agents import Agent, Segment
from agent_cost_projector.core.pricing import PricingConstants, UsageParameters
from agent_cost_projector.core.rollout import (
    PricingModel,
    cheapest_model,
    project_rollout,
    project_workload_rollout,
    summarize_pricing,
)
from agent_cost_projector.core.stages import AdoptionStage, Phase
from agent_cost_projector.core.timeline import (
    AGENT_DAYS_PER_MONTH,
    NO_USAGE,
    WORKING_DAYS_PER_MONTH,
    agent_month_usage,
    build_timeline,
)
from agent_cost_projector.core.validation import (
    DuplicateAgentError,
    EmptyStagesError,
    StageOrderError,
)

# 1,000 users at 50% DAU for the whole projection
FLAT_STAGES = (
    AdoptionStage("Steady", month=1, users=1000, dau=0.5, phase=Phase.ENTERPRISE),
)


def create_test_agent(agent_id=1, **overrides) -> Agent:
    """One-credit conversations, two per active user per day."""
    values = {
        "agent_id": agent_id,
        "name": f"Agent {agent_id}",
        "purpose": "Testing",
        "conversations_per_day": 2,
        "turns_per_conversation": 1,
        "generative_ratio": 0,
        "actions_per_conversation": 0,
    }
    values.update(overrides)
    return Agent(**values)


def run(agents, stages=FLAT_STAGES, **kwargs):
    kwargs.setdefault("hybrid_seat_users", 200)
    return project_rollout(stages, agents, **kwargs)


class TestRolloutShape:
    """Test the structure of the projection."""

    def test_generates_36_months(self):
        """Verify 36 monthly records with year labels."""
        projection = run([create_test_agent()])
        assert len(projection.monthly) == 36
        assert projection.monthly[0].year == "Year 1"
        assert projection.monthly[12].year == "Year 2"
        assert projection.monthly[24].year == "Year 3"
        assert projection.monthly[35].year == "Year 3"

    def test_agent_costs_parallel_monthly(self):
        """Verify per-agent costs line up with the monthly series."""
        agents = [create_test_agent(1), create_test_agent(2)]
        projection = run(agents)
        assert len(projection.agent_monthly_costs) == 36
        first = projection.agent_monthly_costs[0]
        assert first.month == 1
        assert [entry.agent_id for entry in first.per_agent] == [1, 2]

    def test_empty_stages_rejected(self):
        """Verify a rollout needs at least one stage."""
        with pytest.raises(EmptyStagesError):
            project_rollout([], [create_test_agent()], hybrid_seat_users=0)

    def test_unordered_stages_rejected(self):
        """Verify stage months must increase."""
        stages = (
            AdoptionStage("B", month=5, users=100, dau=0.5, phase=Phase.PILOT),
            AdoptionStage("A", month=2, users=100, dau=0.5, phase=Phase.PILOT),
        )
        with pytest.raises(StageOrderError):
            run([create_test_agent()], stages=stages)

    def test_repeated_calls_identical(self):
        """Verify the projection is a pure function of its inputs."""
        first = project_rollout(DEFAULT_STAGES, DEFAULT_AGENTS, hybrid_seat_users=200)
        second = project_rollout(DEFAULT_STAGES, DEFAULT_AGENTS, hybrid_seat_users=200)
        assert first == second

    def test_duplicate_agent_ids_rejected(self):
        """Verify two agents with one id cannot share a cost ledger."""
        agents = [create_test_agent(1), create_test_agent(1, conversations_per_day=1)]
        with pytest.raises(DuplicateAgentError, match="Duplicate agent id 1"):
            run(agents)

    def test_distinct_ids_summarized_separately(self):
        """Verify each agent gets its own 3-year total."""
        agents = [create_test_agent(1), create_test_agent(2, conversations_per_day=1)]
        first, second = run(agents).agent_summaries
        assert first.total == pytest.approx(11520)
        assert second.total == pytest.approx(5760)

    def test_agents_not_mutated(self):
        """Verify the caller's portfolio is left untouched."""
        agents = [create_test_agent(conversations_per_day=500)]
        run(agents)
        assert agents[0].conversations_per_day == 500


class TestRolloutUsage:
    """Test users, conversations and credits."""

    def test_regular_month(self):
        """Verify month 1 usage for one all-user agent."""
        month = run([create_test_agent()]).monthly[0]
        assert month.users == 1000
        assert month.dau == pytest.approx(0.5)
        assert month.dau_percent == pytest.approx(50)
        assert month.active_users == 500
        # 500 active * 2 per day * 30 days
        assert month.conversations == 30000
        assert month.credits == 30000
        assert month.multiplier == 1.0

    def test_peak_month(self):
        """Verify every sixth month carries the peak multiplier."""
        monthly = run([create_test_agent()]).monthly
        assert monthly[5].multiplier == pytest.approx(1.4)
        assert monthly[5].credits == 42000
        assert monthly[11].credits == 42000
        assert monthly[6].credits == 30000

    def test_custom_peak_multiplier(self):
        """Verify the peak multiplier comes from the usage parameters."""
        usage = UsageParameters(peak_multiplier=2)
        monthly = run([create_test_agent()], usage=usage).monthly
        assert monthly[5].credits == 60000

    def test_agents_use_calendar_days(self):
        """Verify per-agent costing uses 30 days, not working days."""
        assert AGENT_DAYS_PER_MONTH == 30
        assert WORKING_DAYS_PER_MONTH == 22

    def test_deploy_month(self):
        """Verify agents cost nothing before they deploy."""
        projection = run([create_test_agent(deploy_month=4)])
        assert projection.monthly[2].credits == 0
        assert projection.monthly[3].credits == 30000
        assert projection.agent_monthly_costs[2].per_agent[0].cost == 0

    def test_disabled_agent_excluded(self):
        """Verify disabled agents are listed with zero cost."""
        projection = run([create_test_agent(1), create_test_agent(2, enabled=False)])
        first = projection.agent_monthly_costs[0]
        assert first.per_agent[0].cost == pytest.approx(300)
        assert first.per_agent[1].cost == 0
        assert first.total_cost == pytest.approx(300)
        assert projection.monthly[0].credits == 30000

    def test_segment_eligibility_follows_phase(self):
        """Verify Management and HQ agents ramp with the rollout phase."""
        stages = (
            AdoptionStage("Pilot", month=1, users=100, dau=1.0, phase=Phase.PILOT),
            AdoptionStage("Expand", month=2, users=100, dau=1.0, phase=Phase.EXPANSION),
            AdoptionStage("Managers", month=3, users=100, dau=1.0, phase=Phase.MANAGEMENT),
        )
        management = create_test_agent(1, conversations_per_day=1, segments=frozenset({Segment.MANAGEMENT}))
        hq = create_test_agent(2, conversations_per_day=1, segments=frozenset({Segment.HQ}))
        costs = run([management, hq], stages=stages).agent_monthly_costs

        # Management: nobody in pilot, 40% in expansion, everyone after
        assert costs[0].per_agent[0].cost == 0
        assert costs[1].per_agent[0].cost == pytest.approx(12)
        assert costs[2].per_agent[0].cost == pytest.approx(30)
        # HQ: everyone in pilot, 15% once management joins
        assert costs[0].per_agent[1].cost == pytest.approx(30)
        assert costs[2].per_agent[1].cost == pytest.approx(4.5)

    def test_no_agents(self):
        """Verify an empty portfolio has no usage cost."""
        month = run([]).monthly[0]
        assert month.credits == 0
        assert month.payg_cost == 0
        assert month.seat_all_cost == 30000


class TestRolloutPricing:
    """Test the five pricing models."""

    def test_regular_month_costs(self):
        """Verify month 1 under every model."""
        month = run([create_test_agent()]).monthly[0]
        # 30,000 credits * $0.01
        assert month.payg_cost == 300
        # 15% prepaid discount
        assert month.p3_cost == 255
        # 200 seats * $30 + 80% of credits on PAYG
        assert month.payg_seat_cost == 6000 + 240
        assert month.p3_seat_cost == 6000 + 204
        # 1,000 users * $30
        assert month.seat_all_cost == 30000

    def test_autonomous_actions_billed_for_seat_users(self):
        """Verify seat users still pay for autonomous actions."""
        agent = create_test_agent(turns_per_conversation=0, actions_per_conversation=1)
        month = run([agent]).monthly[0]
        # 30,000 conversations * 5 credits
        assert month.credits == 150000
        assert month.action_volume == pytest.approx(30000)
        # PAYG users: 150,000 * 0.8 = 120,000 credits
        # Seat users: 30,000 actions * 0.2 * 0.15 * 5 = 4,500 credits
        assert month.payg_seat_cost == 6000 + 1245

    def test_seat_users_capped_at_total(self):
        """Verify the hybrid models never license more seats than users."""
        month = run([create_test_agent()], hybrid_seat_users=5000).monthly[0]
        assert month.payg_seat_cost == 30000
        assert month.seat_all_cost == 30000

    def test_seat_price_clamped(self):
        """Verify the seat price is clamped to 25-35."""
        month = run([create_test_agent()], flat_seat_price=50).monthly[0]
        assert month.seat_all_cost == 35000

    def test_seat_price_from_pricing(self):
        """Verify the pricing argument supplies the seat price when none is given."""
        pricing = PricingConstants(flat_seat_price=25)
        month = run([create_test_agent()], pricing=pricing).monthly[0]
        assert month.seat_all_cost == 25000

        workload = project_workload_rollout(
            FLAT_STAGES, UsageParameters(), hybrid_seat_users=0, pricing=pricing
        )
        assert workload[0].seat_all_cost == 25000

    def test_seat_price_argument_overrides_pricing(self):
        """Verify an explicit seat price wins over the pricing argument."""
        pricing = PricingConstants(flat_seat_price=25)
        month = run([create_test_agent()], pricing=pricing, flat_seat_price=32).monthly[0]
        assert month.seat_all_cost == 32000

    def test_pricing_summary(self):
        """Verify year buckets and 3-year totals."""
        projection = run([create_test_agent()])
        summaries = {summary.model: summary for summary in projection.pricing_summary}

        assert [s.model for s in projection.pricing_summary] == list(PricingModel)
        payg = summaries[PricingModel.PAYG]
        # 10 regular months at $300 and 2 peak months at $420
        assert payg.year1 == 3840
        assert payg.total == 3 * 3840
        assert summaries[PricingModel.P3].total == 30 * 255 + 6 * 357
        assert summaries[PricingModel.SEAT_ALL].total == 36 * 30000

    def test_cheapest_model(self):
        """Verify the cheapest model is picked from the summary."""
        projection = run([create_test_agent()])
        assert projection.cheapest_model.model == PricingModel.P3
        assert projection.cheapest_model.label == "P3 Pre-Purchase"

    def test_cheapest_model_tie_keeps_first(self):
        """Verify ties resolve to the first model listed."""
        projection = run([])
        assert projection.cheapest_model.model == PricingModel.PAYG
        assert cheapest_model(projection.pricing_summary) == projection.pricing_summary[0]

    def test_agent_summaries(self):
        """Verify per-agent 3-year costs."""
        projection = run([create_test_agent(), create_test_agent(2, deploy_month=25)])
        first, late = projection.agent_summaries
        assert first.year1 == pytest.approx(3840)
        assert first.total == pytest.approx(11520)
        assert late.year1 == 0
        assert late.year2 == 0
        assert late.year3 == pytest.approx(3840)


class TestWorkloadRollout:
    """Test the single uniform workload projection."""

    def test_working_days(self):
        """Verify the workload model counts 22 working days."""
        usage = UsageParameters(
            conversations_per_user_per_day=2,
            turns_per_conversation=1,
            generative_ratio=0,
            actions_per_conversation=0
        )
        monthly = project_workload_rollout(FLAT_STAGES, usage, hybrid_seat_users=200)

        assert len(monthly) == 36
        first = monthly[0]
        # 500 active * 2 per day * 22 days
        assert first.conversations == 22000
        assert first.credits == 22000
        assert first.payg_cost == 220
        # 400 active PAYG users * 2 * 22 = 17,600 credits plus 200 seats
        assert first.payg_seat_cost == 6000 + 176
        assert first.seat_all_cost == 30000

    def test_default_usage_peak(self):
        """Verify the workload model applies the peak multiplier."""
        monthly = project_workload_rollout(DEFAULT_STAGES, UsageParameters(), hybrid_seat_users=200)
        assert monthly[5].multiplier == pytest.approx(1.4)
        assert monthly[4].multiplier == 1.0

    def test_empty_stages_rejected(self):
        """Verify the workload model also needs stages."""
        with pytest.raises(EmptyStagesError):
            project_workload_rollout([], UsageParameters(), hybrid_seat_users=0)


class TestTimeline:
    """Test the resolved month-by-month timeline."""

    def test_default_plan_interpolated(self):
        """Verify users are interpolated between stage anchors."""
        timeline = build_timeline(DEFAULT_STAGES, UsageParameters())
        assert len(timeline) == 36
        assert timeline[0].users == 130
        # Halfway between month 19 (12,000) and month 31 (30,000)
        assert timeline[24].users == 21000
        # Flat after the last stage
        assert timeline[35].users == 30000
        assert timeline[35].phase == Phase.ENTERPRISE

    def test_agent_month_usage(self):
        """Verify one agent's monthly usage."""
        month = build_timeline(FLAT_STAGES, UsageParameters())[0]
        usage = agent_month_usage(
            month, frozenset({Segment.ALL}), deploy_month=1,
            conversations_per_day=2, credits_per_conversation=3, actions_per_conversation=0.5
        )
        assert usage.active_users == 500
        assert usage.conversations == 30000
        assert usage.credits == 90000
        assert usage.actions == 15000

    def test_agent_month_usage_before_deploy(self):
        """Verify nothing is consumed before deployment."""
        month = build_timeline(FLAT_STAGES, UsageParameters())[0]
        usage = agent_month_usage(
            month, frozenset({Segment.ALL}), deploy_month=2,
            conversations_per_day=2, credits_per_conversation=3
        )
        assert usage == NO_USAGE

    def test_summarize_pricing_from_monthly(self):
        """Verify summaries are rebuilt from any monthly series."""
        monthly = run([create_test_agent()]).monthly
        summaries = summarize_pricing(monthly[:12])
        assert summaries[0].year1 == 3840
        assert summaries[0].year2 == 0
        assert summaries[0].total == 3840
