"""
Pricing constants, credit model and rounding.

Translates units of agent work into credits and credits into money.
"""

from dataclasses import dataclass, replace
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

from .validation import NumericRange, validate_number


# Business constants - fixed, not user-configurable
PAYG_RATE = 0.01
PACK_COST = 200
PACK_CREDITS = 25000
FLAT_SEAT_PRICE = 30
PREPAID_DISCOUNT = 0.15
BREAKEVEN_CREDITS = FLAT_SEAT_PRICE / PAYG_RATE

FLAT_SEAT_PRICE_RANGE = NumericRange(25, 35)


def round_half_up(value: float, places: int = 0) -> Union[int, float]:
    """Round a value half away from zero.

    Python's built-in round() uses banker's rounding, which turns 232.5
    into 232. Projections are quoted with conventional rounding, so
    232.5 must become 233.

    Args:
        value: Value to round
        places: Number of decimal places to keep

    Returns:
        An int when places is 0, otherwise a float
    """
    quantum = Decimal(1).scaleb(-places)
    rounded = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    if places == 0:
        return int(rounded)
    return float(rounded)


@dataclass(frozen=True)
class CreditModel:
    """Credit cost of each unit of agent work."""
    classic_turn: int = 1
    generative_turn: int = 2
    action: int = 5
    tenant_grounding: int = 10

    def credits_per_conversation(
        self,
        turns: float,
        generative_ratio: float,
        actions: float,
        tenant_grounding: bool = False
    ) -> float:
        """Credits consumed by a single conversation.

        Args:
            turns: Turns per conversation
            generative_ratio: Fraction of turns answered generatively (0-1)
            actions: Actions triggered per conversation
            tenant_grounding: Whether each conversation makes a tenant grounding call

        Returns:
            Credits for one conversation (may be fractional)
        """
        classic_credits = turns * (1 - generative_ratio) * self.classic_turn
        generative_credits = turns * generative_ratio * self.generative_turn
        action_credits = actions * self.action
        grounding_credits = self.tenant_grounding if tenant_grounding else 0
        return classic_credits + generative_credits + action_credits + grounding_credits


CREDIT_MODEL = CreditModel()


@dataclass(frozen=True)
class PricingConstants:
    """Rates for every pricing strategy."""
    payg_rate: float = PAYG_RATE
    pack_price: float = PACK_COST
    pack_credits: int = PACK_CREDITS
    flat_seat_price: float = FLAT_SEAT_PRICE
    prepaid_discount: float = PREPAID_DISCOUNT

    def __post_init__(self):
        """Validate rates that formulas divide by."""
        if self.payg_rate <= 0:
            raise ValueError("payg_rate must be > 0")
        if self.pack_credits <= 0:
            raise ValueError("pack_credits must be > 0")

    @property
    def breakeven_credits(self) -> float:
        """Credits per user per month at which PAYG costs the same as a seat."""
        return self.flat_seat_price / self.payg_rate

    def with_seat_price(self, price: float) -> "PricingConstants":
        """Return a copy with a clamped flat-seat price."""
        return replace(
            self,
            flat_seat_price=validate_number(
                price, FLAT_SEAT_PRICE_RANGE.min, FLAT_SEAT_PRICE_RANGE.max
            )
        )


DEFAULT_PRICING = PricingConstants()


@dataclass(frozen=True)
class UsageParameters:
    """Engine-wide usage tunables, also the defaults for new agents."""
    conversations_per_user_per_day: float = 4
    turns_per_conversation: float = 5
    generative_ratio: float = 0.70
    actions_per_conversation: float = 1.5
    peak_multiplier: float = 1.4
    tenant_grounding: bool = False

    def clamped(self) -> "UsageParameters":
        """Return a copy with every numeric field forced into its range."""
        return replace(
            self,
            **{
                name: USAGE_RANGES[name].clamp(getattr(self, name))
                for name in USAGE_RANGES
            }
        )

    @property
    def credits_per_conversation(self) -> float:
        """Credits for one conversation under these parameters."""
        return CREDIT_MODEL.credits_per_conversation(
            self.turns_per_conversation,
            self.generative_ratio,
            self.actions_per_conversation,
            self.tenant_grounding
        )


USAGE_RANGES = {
    "conversations_per_user_per_day": NumericRange(0, 50),
    "turns_per_conversation": NumericRange(0, 50),
    "generative_ratio": NumericRange(0, 1),
    "actions_per_conversation": NumericRange(0, 20),
    "peak_multiplier": NumericRange(1, 2),
}


def calculate_payg_cost(credits: float, pricing: PricingConstants = DEFAULT_PRICING) -> float:
    """Cost of credits billed pay-as-you-go."""
    return credits * pricing.payg_rate


def calculate_prepaid_cost(credits: float, pricing: PricingConstants = DEFAULT_PRICING) -> float:
    """Cost of credits billed from discounted prepaid capacity."""
    return credits * pricing.payg_rate * (1 - pricing.prepaid_discount)
