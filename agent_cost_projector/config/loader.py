"""
Configuration management and loading.

Reads a projection configuration from YAML. Every section is optional
and falls back to the built-in defaults, but unknown keys and wrong
types are rejected so a typo never silently changes a projection.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Tuple

import yaml

from agent_cost_projector.core.adoption import MonthlyProjectionParams
from agent_cost_projector.core.agents import Agent, Segment, validate_agent_form
from agent_cost_projector.core.pricing import DEFAULT_PRICING, PricingConstants, UsageParameters
from agent_cost_projector.core.stages import AdoptionStage, Phase, validate_stages
from agent_cost_projector.core.validation import parse_complexity_ratio

from .defaults import (
    DEFAULT_AGENTS,
    DEFAULT_FLAT_SEAT_PRICE,
    DEFAULT_MONTHLY,
    DEFAULT_ROLLOUT,
    DEFAULT_SCENARIOS,
    DEFAULT_STAGES,
    DEFAULT_USAGE,
)


@dataclass(frozen=True)
class ScenarioMatrixConfig:
    """Dimensions of the scenario matrix."""
    user_counts: Tuple[float, ...]
    agent_counts: Tuple[int, ...]
    complexity_ratios: Tuple[str, ...]

    def __post_init__(self):
        """Validate every dimension has at least one option."""
        if not self.user_counts:
            raise ValueError("user_counts must not be empty")
        if not self.agent_counts:
            raise ValueError("agent_counts must not be empty")
        if not self.complexity_ratios:
            raise ValueError("complexity_ratios must not be empty")


@dataclass(frozen=True)
class RolloutConfig:
    """Hybrid licensing settings for the rollout projection."""
    hybrid_seat_users: float
    autonomous_action_ratio: float


@dataclass(frozen=True)
class ProjectionConfig:
    """Complete set of projection inputs."""
    usage: UsageParameters
    pricing: PricingConstants
    monthly: MonthlyProjectionParams
    scenarios: ScenarioMatrixConfig
    rollout: RolloutConfig
    stages: Tuple[AdoptionStage, ...]
    agents: Tuple[Agent, ...]


_TOP_LEVEL_KEYS = {'usage', 'pricing', 'monthly', 'scenarios', 'rollout', 'stages', 'agents'}
_USAGE_KEYS = {
    'conversations_per_user_per_day', 'turns_per_conversation', 'generative_ratio',
    'actions_per_conversation', 'peak_multiplier', 'tenant_grounding'
}
_PRICING_KEYS = {'flat_seat_price'}
_STAGE_KEYS = {'label', 'month', 'users', 'dau', 'phase'}
_AGENT_REQUIRED_KEYS = {
    'id', 'name', 'purpose', 'conversations_per_day', 'turns_per_conversation',
    'generative_ratio', 'actions_per_conversation'
}
_AGENT_OPTIONAL_KEYS = {'tenant_grounding', 'deploy_month', 'segments', 'enabled'}


def default_config() -> ProjectionConfig:
    """The built-in projection: seven-stage rollout and three agents."""
    pricing = DEFAULT_PRICING.with_seat_price(DEFAULT_FLAT_SEAT_PRICE)
    return ProjectionConfig(
        usage=DEFAULT_USAGE,
        pricing=pricing,
        monthly=MonthlyProjectionParams(pricing=pricing, **DEFAULT_MONTHLY),
        scenarios=ScenarioMatrixConfig(**DEFAULT_SCENARIOS),
        rollout=RolloutConfig(**DEFAULT_ROLLOUT),
        stages=DEFAULT_STAGES,
        agents=DEFAULT_AGENTS
    )


def load_projection_config(path: str) -> ProjectionConfig:
    """Load and validate a projection configuration from a YAML file.

    Args:
        path: Path to YAML configuration file

    Returns:
        Validated ProjectionConfig, with defaults for omitted sections

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If configuration is invalid
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Projection config file not found: {path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML in config file {path}: {e}")

    if not raw_config:
        raise ValueError("Configuration file is empty")
    if not isinstance(raw_config, dict):
        raise ValueError("Configuration must be a dictionary")

    unknown_keys = set(raw_config.keys()) - _TOP_LEVEL_KEYS
    if unknown_keys:
        raise ValueError(f"Unknown configuration keys: {unknown_keys}")

    defaults = default_config()

    usage_data = _section(raw_config, 'usage', _USAGE_KEYS)
    usage = UsageParameters(**{**_as_dict(defaults.usage, _USAGE_KEYS), **usage_data})

    pricing_data = _section(raw_config, 'pricing', _PRICING_KEYS)
    pricing = DEFAULT_PRICING.with_seat_price(
        _number(pricing_data.get('flat_seat_price', DEFAULT_FLAT_SEAT_PRICE), 'pricing.flat_seat_price')
    )

    monthly_data = _section(raw_config, 'monthly', set(DEFAULT_MONTHLY))
    monthly_values = {**DEFAULT_MONTHLY, **monthly_data}
    for key, value in monthly_values.items():
        if key != 'complexity_ratio':
            _number(value, f"monthly.{key}")
    parse_complexity_ratio(monthly_values['complexity_ratio'])
    monthly = MonthlyProjectionParams(pricing=pricing, **monthly_values)

    scenarios_data = _section(raw_config, 'scenarios', set(DEFAULT_SCENARIOS))
    scenario_values = {**DEFAULT_SCENARIOS, **scenarios_data}
    for key, value in scenario_values.items():
        if not isinstance(value, (list, tuple)):
            raise ValueError(f"'scenarios.{key}' must be a list")
    for ratio in scenario_values['complexity_ratios']:
        parse_complexity_ratio(ratio)
    scenarios = ScenarioMatrixConfig(
        user_counts=tuple(_number(v, 'scenarios.user_counts') for v in scenario_values['user_counts']),
        agent_counts=tuple(scenario_values['agent_counts']),
        complexity_ratios=tuple(scenario_values['complexity_ratios'])
    )

    rollout_data = _section(raw_config, 'rollout', set(DEFAULT_ROLLOUT))
    rollout = RolloutConfig(**{
        key: _number(value, f"rollout.{key}")
        for key, value in {**DEFAULT_ROLLOUT, **rollout_data}.items()
    })

    stages = defaults.stages
    if 'stages' in raw_config:
        stages = _parse_stages(raw_config['stages'])

    agents = defaults.agents
    if 'agents' in raw_config:
        agents = _parse_agents(raw_config['agents'])

    return ProjectionConfig(
        usage=usage,
        pricing=pricing,
        monthly=monthly,
        scenarios=scenarios,
        rollout=rollout,
        stages=stages,
        agents=agents
    )


def _section(raw_config: Dict, name: str, allowed_keys: set) -> Dict[str, Any]:
    """Fetch an optional mapping section and reject unknown keys."""
    data = raw_config.get(name) or {}
    if not isinstance(data, dict):
        raise ValueError(f"'{name}' must be a dictionary")

    unknown_keys = set(data.keys()) - allowed_keys
    if unknown_keys:
        raise ValueError(f"Unknown {name} keys: {unknown_keys}")
    return data


def _as_dict(record: Any, keys: set) -> Dict[str, Any]:
    return {key: getattr(record, key) for key in keys}


def _number(value: Any, path: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"'{path}' must be a number")
    return value


def _parse_stages(data: Any) -> Tuple[AdoptionStage, ...]:
    """Parse and validate the stage list.

    Raises:
        ValueError: If a stage is malformed or the list is empty or unordered
    """
    if not isinstance(data, list):
        raise ValueError("'stages' must be a list")

    stages = []
    for index, stage_data in enumerate(data):
        path = f"stages[{index}]"
        if not isinstance(stage_data, dict):
            raise ValueError(f"{path} must be a dictionary")

        unknown_keys = set(stage_data.keys()) - _STAGE_KEYS
        if unknown_keys:
            raise ValueError(f"Unknown keys in {path}: {unknown_keys}")
        missing_keys = _STAGE_KEYS - set(stage_data.keys())
        if missing_keys:
            raise ValueError(f"Missing required keys in {path}: {sorted(missing_keys)}")

        if not isinstance(stage_data['month'], int) or isinstance(stage_data['month'], bool):
            raise ValueError(f"'month' in {path} must be a whole number")

        stages.append(AdoptionStage(
            label=str(stage_data['label']),
            month=stage_data['month'],
            users=_number(stage_data['users'], f"{path}.users"),
            dau=_number(stage_data['dau'], f"{path}.dau"),
            phase=_parse_enum(Phase, stage_data['phase'], f"{path}.phase")
        ))

    return validate_stages(stages)


def _parse_agents(data: Any) -> Tuple[Agent, ...]:
    """Parse and validate the agent list.

    Raises:
        ValueError: If an agent is malformed or two agents share an id
    """
    if not isinstance(data, list):
        raise ValueError("'agents' must be a list")

    agents = []
    seen_ids = set()
    for index, agent_data in enumerate(data):
        path = f"agents[{index}]"
        if not isinstance(agent_data, dict):
            raise ValueError(f"{path} must be a dictionary")

        unknown_keys = set(agent_data.keys()) - _AGENT_REQUIRED_KEYS - _AGENT_OPTIONAL_KEYS
        if unknown_keys:
            raise ValueError(f"Unknown keys in {path}: {unknown_keys}")
        missing_keys = _AGENT_REQUIRED_KEYS - set(agent_data.keys())
        if missing_keys:
            raise ValueError(f"Missing required keys in {path}: {sorted(missing_keys)}")

        agent_id = agent_data['id']
        if not isinstance(agent_id, int) or isinstance(agent_id, bool):
            raise ValueError(f"'id' in {path} must be a whole number")
        if agent_id in seen_ids:
            raise ValueError(f"Duplicate agent id {agent_id} in {path}")
        seen_ids.add(agent_id)

        validate_agent_form(str(agent_data['name']), str(agent_data['purpose']))

        segments = agent_data.get('segments', ['All'])
        if not isinstance(segments, list) or not segments:
            raise ValueError(f"'segments' in {path} must be a non-empty list")

        agents.append(Agent(
            agent_id=agent_id,
            name=str(agent_data['name']),
            purpose=str(agent_data['purpose']),
            conversations_per_day=_number(agent_data['conversations_per_day'], f"{path}.conversations_per_day"),
            turns_per_conversation=_number(agent_data['turns_per_conversation'], f"{path}.turns_per_conversation"),
            generative_ratio=_number(agent_data['generative_ratio'], f"{path}.generative_ratio"),
            actions_per_conversation=_number(agent_data['actions_per_conversation'], f"{path}.actions_per_conversation"),
            tenant_grounding=bool(agent_data.get('tenant_grounding', False)),
            deploy_month=int(_number(agent_data.get('deploy_month', 1), f"{path}.deploy_month")),
            segments=frozenset(_parse_enum(Segment, s, f"{path}.segments") for s in segments),
            enabled=bool(agent_data.get('enabled', True))
        ).clamped())

    return tuple(agents)


def _parse_enum(enum_type, value: Any, path: str):
    """Look an enum member up by its value, case-insensitively."""
    if isinstance(value, str):
        for member in enum_type:
            if member.value.lower() == value.strip().lower():
                return member
    valid_values = [member.value for member in enum_type]
    raise ValueError(f"'{path}' must be one of: {valid_values}")
