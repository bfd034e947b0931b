"""
Adoption stages and interpolation between them.

A rollout plan is a sparse, ordered list of milestones. Values between
milestones are linearly interpolated; before the first and after the
last milestone they hold flat.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Iterable, Sequence, Tuple

from .validation import EmptyStagesError, NumericRange, StageOrderError


class Phase(Enum):
    """Organisational reach of a rollout stage."""
    PILOT = "Pilot"
    EXPANSION = "Expansion"
    MANAGEMENT = "Management"
    STORES = "Stores"
    ENTERPRISE = "Enterprise"


USERS_RANGE = NumericRange(0, 10_000_000)
DAU_RANGE = NumericRange(0, 1)


@dataclass(frozen=True)
class AdoptionStage:
    """A rollout milestone anchoring a month to a user count and DAU fraction."""
    label: str
    month: int
    users: float
    dau: float
    phase: Phase


def validate_stages(stages: Iterable[AdoptionStage]) -> Tuple[AdoptionStage, ...]:
    """Check stage ordering and clamp stage values.

    Args:
        stages: Stages sorted by anchor month

    Returns:
        The stages as a tuple, with users and DAU clamped

    Raises:
        EmptyStagesError: If there are no stages
        StageOrderError: If anchor months are not strictly increasing
    """
    stages = tuple(stages)
    if not stages:
        raise EmptyStagesError("At least one adoption stage is required")

    for previous, current in zip(stages, stages[1:]):
        if current.month <= previous.month:
            raise StageOrderError(
                f"Stage '{current.label}' (month {current.month}) must come after "
                f"'{previous.label}' (month {previous.month})"
            )

    return tuple(
        replace(stage, users=USERS_RANGE.clamp(stage.users), dau=DAU_RANGE.clamp(stage.dau))
        for stage in stages
    )


def interpolate(
    month: int,
    stages: Sequence[AdoptionStage],
    get_value: Callable[[AdoptionStage], float]
) -> float:
    """Linearly interpolate a stage value at a month.

    Args:
        month: Target month (1-based)
        stages: Validated, sorted stages
        get_value: Extracts the value to interpolate from a stage

    Returns:
        The interpolated value; flat beyond either end of the plan
    """
    before = None
    after = None
    for stage in stages:
        if stage.month <= month:
            before = stage
        elif after is None:
            after = stage

    if before is None:
        return get_value(after)
    if after is None:
        return get_value(before)

    progress = (month - before.month) / (after.month - before.month)
    return get_value(before) + (get_value(after) - get_value(before)) * progress


def current_phase(month: int, stages: Sequence[AdoptionStage]) -> Phase:
    """Phase of the most advanced stage reached by a month.

    Before the first anchor month the first stage's phase applies.
    """
    for stage in reversed(stages):
        if stage.month <= month:
            return stage.phase
    return stages[0].phase
