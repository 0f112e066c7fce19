"""
Configuration service for runtime planning settings.
"""
import os
from typing import Optional


_EXPECTED_END_EPSILON: Optional[float] = None
_SINGLE_IN_PROGRESS_PLAN: Optional[bool] = None

_DEFAULT_CODE_PREFIX = "RP"
_DEFAULT_EPSILON = 0.05
_DEFAULT_REFRESH_MINUTES = 3


def get_plan_code_prefix() -> str:
    value = os.getenv("RECEIVE_PLAN_CODE_PREFIX", _DEFAULT_CODE_PREFIX)
    normalized = value.strip().upper().replace(" ", "_")
    return normalized or _DEFAULT_CODE_PREFIX


def get_expected_end_epsilon() -> float:
    """Lower bound for the processed fraction used by the end-time estimate."""
    if _EXPECTED_END_EPSILON is not None:
        return _EXPECTED_END_EPSILON

    env_value = os.getenv("EXPECTED_END_EPSILON")
    if env_value:
        try:
            parsed = float(env_value)
        except ValueError:
            return _DEFAULT_EPSILON
        if 0 < parsed <= 1:
            return parsed

    return _DEFAULT_EPSILON


def set_expected_end_epsilon(epsilon: Optional[float]) -> None:
    """Override the estimate epsilon in memory. ``None`` restores the env value."""
    global _EXPECTED_END_EPSILON
    _EXPECTED_END_EPSILON = None if epsilon is None else float(epsilon)


def is_single_in_progress_plan() -> bool:
    """Whether only one plan may be IN_PROGRESS at a time."""
    if _SINGLE_IN_PROGRESS_PLAN is not None:
        return _SINGLE_IN_PROGRESS_PLAN
    return os.getenv("SINGLE_IN_PROGRESS_PLAN", "true").lower() in {"1", "true", "yes"}


def set_single_in_progress_plan(enabled: Optional[bool]) -> None:
    global _SINGLE_IN_PROGRESS_PLAN
    _SINGLE_IN_PROGRESS_PLAN = enabled


def get_plan_refresh_interval_minutes() -> int:
    env_value = os.getenv("PLAN_REFRESH_INTERVAL_MINUTES")
    if env_value:
        try:
            return max(int(env_value), 1)
        except ValueError:
            return _DEFAULT_REFRESH_MINUTES
    return _DEFAULT_REFRESH_MINUTES
