"""
Utility functions for ceac-filler
"""
import logging
import os
import re
from datetime import datetime, timezone
from typing import Any, Pattern

logger = logging.getLogger(__name__)

# Pre-compile regex pattern for better performance
ENV_VAR_PATTERN: Pattern[str] = re.compile(r'\$\{([^}]+)\}')


def substitute_env_vars(value: str, warn_missing: bool = True) -> str:
    """Substitute environment variables in a string.

    Args:
        value: String that may contain ${VAR_NAME} placeholders
        warn_missing: Whether to log warnings for missing variables

    Returns:
        String with environment variables substituted

    Example:
        >>> os.environ['CEAC_FILLER_KEY'] = '00ff'
        >>> substitute_env_vars('${CEAC_FILLER_KEY}')
        '00ff'
    """
    def replace_var(match: re.Match[str]) -> str:
        var_name = match.group(1)

        if (var_value := os.environ.get(var_name)) is not None:
            return var_value

        if warn_missing:
            logger.warning(f"Environment variable ${{{var_name}}} is not set")
        return match.group(0)  # Return the original ${VAR_NAME}

    return ENV_VAR_PATTERN.sub(replace_var, value)


def has_unresolved_env_vars(value: str) -> bool:
    """Check whether a string still carries ${VAR_NAME} placeholders"""
    return ENV_VAR_PATTERN.search(value) is not None


def substitute_env_vars_deep(value: Any) -> Any:
    """Apply substitute_env_vars to every string inside nested dicts and lists"""
    if isinstance(value, str):
        return substitute_env_vars(value)
    if isinstance(value, dict):
        return {key: substitute_env_vars_deep(item) for key, item in value.items()}
    if isinstance(value, list):
        return [substitute_env_vars_deep(item) for item in value]
    return value


def utc_timestamp() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision"""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def epoch_millis(moment: datetime) -> int:
    """Convert a datetime to integer milliseconds since the epoch"""
    return int(moment.timestamp() * 1000)
