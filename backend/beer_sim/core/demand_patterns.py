import math
import random
from enum import Enum
from typing import Any, Dict, List, Optional


class DemandPatternType(str, Enum):
    CLASSIC = "classic"
    RANDOM = "random"
    SEASONAL = "seasonal"
    CONSTANT = "constant"


DEFAULT_CLASSIC_PARAMS = {
    "initial_demand": 4,
    "change_week": 5,
    "final_demand": 8,
    "revert_week": 25,
}

DEFAULT_NUM_WEEKS = 35


def _safe_int(value: Any, default: int) -> int:
    """Convert a value to an integer, falling back to the provided default."""
    try:
        if value is None:
            raise ValueError("None")
        return int(value)
    except (TypeError, ValueError):
        return default


def normalize_classic_params(params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Normalize classic demand parameters to the {initial, change_week, final, revert_week} schema.

    ``revert_week`` is optional: when it is missing or ``None`` demand stays at
    ``final_demand`` once the step has happened.
    """
    params = params or {}

    initial = _safe_int(
        params.get("initial_demand", params.get("base_demand")),
        DEFAULT_CLASSIC_PARAMS["initial_demand"],
    )

    if "change_week" in params:
        change_week = _safe_int(params.get("change_week"), DEFAULT_CLASSIC_PARAMS["change_week"])
    else:
        stable_period = params.get("stable_period")
        change_week = (
            _safe_int(stable_period, DEFAULT_CLASSIC_PARAMS["change_week"] - 1) + 1
            if stable_period is not None
            else DEFAULT_CLASSIC_PARAMS["change_week"]
        )

    change_week = max(1, change_week)

    if "final_demand" in params:
        final = _safe_int(params.get("final_demand"), DEFAULT_CLASSIC_PARAMS["final_demand"])
    else:
        step_increase = params.get("step_increase")
        final = (
            initial + _safe_int(step_increase, DEFAULT_CLASSIC_PARAMS["final_demand"] - initial)
            if step_increase is not None
            else DEFAULT_CLASSIC_PARAMS["final_demand"]
        )

    revert_week: Optional[int] = None
    if params.get("revert_week") is not None:
        revert_week = max(change_week + 1, _safe_int(params.get("revert_week"), change_week + 1))

    return {
        "initial_demand": max(0, initial),
        "change_week": change_week,
        "final_demand": max(0, final),
        "revert_week": revert_week,
    }


def normalize_random_params(params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Clamp the bounds to non-negative integers, swapping them if inverted."""
    params = params or {}
    low = max(0, _safe_int(params.get("min_demand"), 1))
    high = max(0, _safe_int(params.get("max_demand"), 10))
    if low > high:
        low, high = high, low
    seed = params.get("seed")
    return {
        "min_demand": low,
        "max_demand": high,
        "seed": None if seed is None else _safe_int(seed, 0),
    }


def normalize_seasonal_params(params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    params = params or {}
    return {
        "base_demand": max(0, _safe_int(params.get("base_demand"), 4)),
        "amplitude": max(0, _safe_int(params.get("amplitude"), 2)),
        "period": max(1, _safe_int(params.get("period"), 12)),
    }


def normalize_constant_params(params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    params = params or {}
    demand = params.get("demand", params.get("base_demand"))
    return {"demand": max(0, _safe_int(demand, DEFAULT_CLASSIC_PARAMS["initial_demand"]))}


_PARAM_NORMALIZERS = {
    DemandPatternType.CLASSIC: lambda params: normalize_classic_params(params or DEFAULT_CLASSIC_PARAMS),
    DemandPatternType.RANDOM: normalize_random_params,
    DemandPatternType.SEASONAL: normalize_seasonal_params,
    DemandPatternType.CONSTANT: normalize_constant_params,
}


def normalize_demand_pattern(pattern_config: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Return a normalized demand pattern dictionary with sanitized parameters.

    Unknown pattern types fall back to the classic step. Parameters that do
    not belong to the resolved type are dropped.
    """
    pattern = dict(pattern_config or {})
    try:
        pattern_type = DemandPatternType(pattern.get("type", DemandPatternType.CLASSIC))
    except ValueError:
        pattern_type = DemandPatternType.CLASSIC

    raw_params = pattern.get("params")
    params = _PARAM_NORMALIZERS[pattern_type](raw_params if isinstance(raw_params, dict) else {})

    normalized = {key: value for key, value in pattern.items() if key not in {"type", "params"}}
    normalized.update({"type": pattern_type.value, "params": params})
    return normalized


class DemandGenerator:
    """Generates customer demand sequences for the retailer.

    Every generator runs its arguments through the matching ``normalize_*``
    helper, so direct calls and config-driven calls see the same clamping.
    """

    @staticmethod
    def generate_classic(
        num_rounds: int = DEFAULT_NUM_WEEKS,
        initial_demand: Optional[int] = None,
        change_week: Optional[int] = None,
        final_demand: Optional[int] = None,
        revert_week: Optional[int] = None,
        stable_period: Optional[int] = None,
        step_increase: Optional[int] = None,
    ) -> List[int]:
        """Step from ``initial_demand`` to ``final_demand``, optionally reverting."""
        normalized = normalize_classic_params(
            {
                "initial_demand": initial_demand,
                "change_week": change_week,
                "final_demand": final_demand,
                "revert_week": revert_week,
                "stable_period": stable_period,
                "step_increase": step_increase,
            }
        )
        change_at = normalized["change_week"]
        revert_at = normalized["revert_week"]

        def stepped(week: int) -> bool:
            return week >= change_at and (revert_at is None or week < revert_at)

        return [
            normalized["final_demand"] if stepped(week) else normalized["initial_demand"]
            for week in range(1, max(0, num_rounds) + 1)
        ]

    @staticmethod
    def generate_random(
        num_rounds: int,
        min_demand: int = 1,
        max_demand: int = 10,
        seed: Optional[int] = None,
    ) -> List[int]:
        """Uniform integer demand in ``[min_demand, max_demand]``; reproducible with ``seed``."""
        normalized = normalize_random_params(
            {"min_demand": min_demand, "max_demand": max_demand, "seed": seed}
        )
        rng = random.Random(normalized["seed"])
        low, high = normalized["min_demand"], normalized["max_demand"]
        return [rng.randint(low, high) for _ in range(max(0, num_rounds))]

    @staticmethod
    def generate_seasonal(
        num_rounds: int,
        base_demand: int = 4,
        amplitude: int = 2,
        period: int = 12,
    ) -> List[int]:
        """Sine wave around ``base_demand``, starting at the base level in week 1."""
        normalized = normalize_seasonal_params(
            {"base_demand": base_demand, "amplitude": amplitude, "period": period}
        )
        base = normalized["base_demand"]
        swing = normalized["amplitude"]
        period = normalized["period"]
        return [
            max(0, round(base + swing * math.sin(2 * math.pi * ((week - 1) % period) / period)))
            for week in range(1, max(0, num_rounds) + 1)
        ]

    @staticmethod
    def generate_constant(num_rounds: int, demand: int = 4) -> List[int]:
        level = normalize_constant_params({"demand": demand})["demand"]
        return [level] * max(0, num_rounds)

    @classmethod
    def generate(cls, pattern_type: DemandPatternType, num_rounds: int, **kwargs) -> List[int]:
        generators = {
            DemandPatternType.CLASSIC: cls.generate_classic,
            DemandPatternType.RANDOM: cls.generate_random,
            DemandPatternType.SEASONAL: cls.generate_seasonal,
            DemandPatternType.CONSTANT: cls.generate_constant,
        }
        try:
            generator = generators[DemandPatternType(pattern_type)]
        except (KeyError, ValueError):
            raise ValueError(f"Unknown demand pattern type: {pattern_type}") from None
        return generator(num_rounds, **kwargs)


DEFAULT_DEMAND_PATTERN = {
    "type": DemandPatternType.CLASSIC.value,
    "params": DEFAULT_CLASSIC_PARAMS.copy(),
}

# 4 units/week for weeks 1-4, 8 for weeks 5-24, back to 4 for weeks 25-35.
DEFAULT_CUSTOMER_DEMAND: List[int] = DemandGenerator.generate_classic(
    DEFAULT_NUM_WEEKS, **DEFAULT_CLASSIC_PARAMS
)


def get_demand_pattern(
    pattern_config: Optional[Dict[str, Any]] = None,
    num_rounds: int = DEFAULT_NUM_WEEKS,
) -> List[int]:
    """Expand a pattern config into ``num_rounds`` weekly demand values."""
    normalized = normalize_demand_pattern(pattern_config or DEFAULT_DEMAND_PATTERN)
    return DemandGenerator.generate(
        DemandPatternType(normalized["type"]), num_rounds, **normalized["params"]
    )
