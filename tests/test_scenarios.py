"""
Tests for the scenario matrix generator.
"""

import pytest

from agent_cost_projector.core.pricing import PricingConstants
from agent_cost_projector.core.scenarios import (
    calculate_savings_percent,
    generate_scenarios,
)
from agent_cost_projector.core.validation import InvalidRatioError, UndefinedSavingsError

USER_SCENARIOS = [1300, 5000, 30000]
AGENT_SCENARIOS = [10, 30, 100]
COMPLEXITY_SCENARIOS = ["80/20", "70/30", "50/50"]


class TestScenarioMatrix:
    """Test matrix shape and ordering."""

    def test_generates_all_combinations(self):
        """Verify 3 x 3 x 3 scenarios."""
        scenarios = generate_scenarios(
            USER_SCENARIOS, AGENT_SCENARIOS, COMPLEXITY_SCENARIOS, 75, 600, 60
        )
        assert len(scenarios) == 27

    def test_iteration_order(self):
        """Verify users are outermost and ratios innermost."""
        scenarios = generate_scenarios(
            USER_SCENARIOS, AGENT_SCENARIOS, COMPLEXITY_SCENARIOS, 75, 600, 60
        )
        assert (scenarios[0].users, scenarios[0].agents, scenarios[0].ratio) == (1300, 10, "80/20")
        assert (scenarios[1].users, scenarios[1].agents, scenarios[1].ratio) == (1300, 10, "70/30")
        assert (scenarios[3].users, scenarios[3].agents, scenarios[3].ratio) == (1300, 30, "80/20")
        assert (scenarios[9].users, scenarios[9].agents, scenarios[9].ratio) == (5000, 10, "80/20")
        assert (scenarios[26].users, scenarios[26].agents, scenarios[26].ratio) == (30000, 100, "50/50")

    def test_empty_dimension_gives_no_scenarios(self):
        """Verify an empty option list yields an empty matrix."""
        assert generate_scenarios([1000], [], ["80/20"], 75, 600, 60) == ()

    def test_repeated_calls_identical(self):
        """Verify the generator is a pure function of its inputs."""
        args = (USER_SCENARIOS, AGENT_SCENARIOS, COMPLEXITY_SCENARIOS, 75, 600, 60)
        assert generate_scenarios(*args) == generate_scenarios(*args)


class TestScenarioCosts:
    """Test the per-scenario figures."""

    def test_known_enterprise_scenario(self):
        """Verify 30,000 users at 50/50 complexity and 60% adoption."""
        scenario = generate_scenarios([30000], [100], ["50/50"], 75, 600, 60)[0]

        # 30,000 * 0.6
        assert scenario.active_users == 18000
        # (75 * 0.5) + (600 * 0.5) = 337.5, displayed rounded
        assert scenario.credits_per_user_month == 338
        # 18,000 * 337.5 * $0.01
        assert scenario.monthly_payg == 60750
        # Money math uses 337.5, not 338
        assert scenario.yearly_payg == 729000
        # 30,000 * $30 * 12
        assert scenario.yearly_flat_seat == 10800000
        assert scenario.savings == 10071000
        assert scenario.savings_percent == 93

    def test_complexity_ratio_rounding(self):
        """Verify displayed credits round halves up."""
        scenarios = generate_scenarios([1000], [10], COMPLEXITY_SCENARIOS, 75, 600, 60)
        assert scenarios[0].credits_per_user_month == 180
        # 232.5 rounds up, not to even
        assert scenarios[1].credits_per_user_month == 233
        assert scenarios[2].credits_per_user_month == 338

    def test_steady_state_adoption(self):
        """Verify the steady-state adoption drives active users."""
        at_50 = generate_scenarios([1000], [10], ["80/20"], 75, 600, 50)[0]
        at_80 = generate_scenarios([1000], [10], ["80/20"], 75, 600, 80)[0]
        assert at_50.active_users == 500
        assert at_80.active_users == 800

    def test_agent_count_is_label_only(self):
        """Verify the agent count does not change any cost."""
        few, many = generate_scenarios([5000], [10, 100], ["70/30"], 75, 600, 60)
        assert few.agents == 10
        assert many.agents == 100
        assert few.yearly_payg == many.yearly_payg
        assert few.savings == many.savings

    def test_payg_cheaper_for_low_usage(self):
        """Verify low usage makes PAYG the cheaper option."""
        scenario = generate_scenarios([1300], [10], ["80/20"], 75, 600, 60)[0]
        assert scenario.savings > 0
        assert scenario.savings_percent > 0

    def test_seats_cheaper_above_breakeven(self):
        """Verify usage above 3,000 credits/user makes seats cheaper."""
        scenario = generate_scenarios([1000], [10], ["50/50"], 5000, 10000, 100)[0]
        assert scenario.credits_per_user_month == 7500
        assert scenario.yearly_payg == 900000
        assert scenario.yearly_flat_seat == 360000
        assert scenario.savings == -540000
        assert scenario.savings_percent == -150

    def test_custom_seat_price(self):
        """Verify the seat price comes from the pricing constants."""
        pricing = PricingConstants(flat_seat_price=25)
        scenario = generate_scenarios([1000], [10], ["80/20"], 75, 600, 60, pricing=pricing)[0]
        assert scenario.yearly_flat_seat == 1000 * 25 * 12


class TestScenarioErrors:
    """Test error conditions."""

    def test_zero_users_savings_percent_undefined(self):
        """Verify a zero seat baseline is an error, not 0%."""
        with pytest.raises(UndefinedSavingsError):
            generate_scenarios([0], [10], ["80/20"], 75, 600, 60)

    def test_zero_baseline_is_zero_division(self):
        """Verify callers can catch the condition as ZeroDivisionError."""
        with pytest.raises(ZeroDivisionError):
            calculate_savings_percent(100, 0)

    def test_savings_percent(self):
        """Verify percentages round half up."""
        assert calculate_savings_percent(50, 200) == 25
        assert calculate_savings_percent(1, 8) == 13

    def test_malformed_ratio_raises(self):
        """Verify a bad ratio anywhere in the list fails fast."""
        with pytest.raises(InvalidRatioError):
            generate_scenarios([1000], [10], ["80/20", "90/20"], 75, 600, 60)
