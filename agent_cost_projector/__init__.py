"""
Agent Cost Projector.

Multi-year cost projections for usage-billed agents under pay-as-you-go,
prepaid, hybrid seat+usage and flat-seat pricing.
"""

from .core.adoption import AdoptionMonth, MonthlyProjectionParams, project_monthly
from .core.agents import (
    Agent,
    Segment,
    add_agent,
    next_agent_id,
    remove_agent,
    update_agent,
    validate_agent_form,
)
from .core.breakpoint import BreakpointStatus, LicensingBreakpoint
from .core.pricing import (
    BREAKEVEN_CREDITS,
    CreditModel,
    PricingConstants,
    UsageParameters,
)
from .core.rollout import (
    PricingModel,
    RolloutProjection,
    project_rollout,
    project_workload_rollout,
)
from .core.scenarios import ScenarioRecord, generate_scenarios
from .core.stages import AdoptionStage, Phase
from .core.validation import (
    AgentValidationError,
    DuplicateAgentError,
    EmptyStagesError,
    InvalidRatioError,
    ProjectionError,
    StageOrderError,
    UndefinedSavingsError,
    validate_number,
)

__all__ = [
    "AdoptionMonth",
    "AdoptionStage",
    "Agent",
    "AgentValidationError",
    "BREAKEVEN_CREDITS",
    "BreakpointStatus",
    "CreditModel",
    "DuplicateAgentError",
    "EmptyStagesError",
    "InvalidRatioError",
    "LicensingBreakpoint",
    "MonthlyProjectionParams",
    "Phase",
    "PricingConstants",
    "PricingModel",
    "ProjectionError",
    "RolloutProjection",
    "ScenarioRecord",
    "Segment",
    "StageOrderError",
    "UndefinedSavingsError",
    "UsageParameters",
    "add_agent",
    "generate_scenarios",
    "next_agent_id",
    "project_monthly",
    "project_rollout",
    "project_workload_rollout",
    "remove_agent",
    "update_agent",
    "validate_agent_form",
    "validate_number",
]
