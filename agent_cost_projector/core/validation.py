"""
Input validation and clamping.

Every public engine function passes its numeric inputs through here
before any formula reads them, so NaN never reaches the arithmetic.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Tuple

logger = logging.getLogger(__name__)


class ProjectionError(ValueError):
    """Raised when projection inputs cannot be used."""


class InvalidRatioError(ProjectionError):
    """Raised for a complexity ratio that is not "S/C" with S + C = 100."""


class EmptyStagesError(ProjectionError):
    """Raised when a rollout has no adoption stages to interpolate between."""


class StageOrderError(ProjectionError):
    """Raised when stage anchor months are not strictly increasing."""


class AgentValidationError(ProjectionError):
    """Raised when an agent form is missing its name or purpose."""


class DuplicateAgentError(ProjectionError):
    """Raised when two agents in one portfolio share an id."""


class UndefinedSavingsError(ProjectionError, ZeroDivisionError):
    """Raised when a savings percentage has a zero cost baseline."""


@dataclass(frozen=True)
class NumericRange:
    """Inclusive bounds for a numeric input."""
    min: float
    max: float

    def __post_init__(self):
        if self.min > self.max:
            raise ValueError("range min must be <= max")

    def clamp(self, value: Any) -> float:
        return validate_number(value, self.min, self.max)


def validate_number(value: Any, min_value: float, max_value: float) -> float:
    """Clamp a numeric input into [min_value, max_value].

    A cleared field (None, NaN, a bool, or anything else that is not a
    number) is treated as min_value rather than as "no value".

    Args:
        value: Raw input
        min_value: Lower bound, also the fallback for invalid input
        max_value: Upper bound

    Returns:
        The clamped value
    """
    if isinstance(value, bool):
        logger.debug("Boolean input %r treated as %s", value, min_value)
        return min_value

    if not isinstance(value, (int, float)):
        try:
            value = float(value)
        except (TypeError, ValueError):
            logger.debug("Non-numeric input %r treated as %s", value, min_value)
            return min_value

    if math.isnan(value):
        logger.debug("NaN input treated as %s", min_value)
        return min_value

    clamped = min(max(value, min_value), max_value)
    if clamped != value:
        logger.debug("Clamped %s into [%s, %s]", value, min_value, max_value)
    return clamped


def parse_complexity_ratio(ratio: str) -> Tuple[float, float]:
    """Parse an "S/C" simple/complex ratio into fractions.

    Args:
        ratio: String such as "80/20"; both parts are whole percentages

    Returns:
        (simple_fraction, complex_fraction), e.g. (0.8, 0.2)

    Raises:
        InvalidRatioError: If the string is malformed or does not sum to 100
    """
    if not isinstance(ratio, str):
        raise InvalidRatioError(f"Complexity ratio must be a string, got {ratio!r}")

    parts = ratio.split('/')
    if len(parts) != 2:
        raise InvalidRatioError(f"Complexity ratio must look like 'S/C': {ratio!r}")

    try:
        simple_percent, complex_percent = (int(part.strip()) for part in parts)
    except ValueError:
        raise InvalidRatioError(f"Complexity ratio parts must be whole numbers: {ratio!r}")

    if simple_percent < 0 or complex_percent < 0:
        raise InvalidRatioError(f"Complexity ratio parts cannot be negative: {ratio!r}")
    if simple_percent + complex_percent != 100:
        raise InvalidRatioError(f"Complexity ratio must sum to 100: {ratio!r}")

    return simple_percent / 100, complex_percent / 100
