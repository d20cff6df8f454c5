"""
Retention policy factory.

Validates a (kind, parameter) pair and builds the matching policy.
"""

from typing import Any

from backup_manager.core.exceptions import ConfigurationError
from backup_manager.core.models import RetentionKind

from .policies import AgeLimitPolicy, CountLimitPolicy, RetentionPolicy, SizeLimitPolicy

_POLICY_TYPES: dict[RetentionKind, type] = {
    RetentionKind.COUNT_LIMIT: CountLimitPolicy,
    RetentionKind.AGE_LIMIT: AgeLimitPolicy,
    RetentionKind.SIZE_LIMIT: SizeLimitPolicy,
}


class PolicyFactory:
    """Builds retention policies from a kind tag and a numeric threshold."""

    @staticmethod
    def parse_kind(kind: RetentionKind | str) -> RetentionKind:
        """Coerce a kind tag, raising ConfigurationError for unknown values."""
        if isinstance(kind, RetentionKind):
            return kind
        try:
            return RetentionKind(kind)
        except ValueError:
            valid = ", ".join(k.value for k in RetentionKind)
            raise ConfigurationError(
                f"Unknown retention policy type '{kind}'. Expected one of: {valid}",
                config_key="policy_kind",
            ) from None

    @staticmethod
    def parse_parameter(parameter: Any, kind: RetentionKind) -> int:
        """Coerce a threshold to a non-negative integer."""
        if isinstance(parameter, bool):
            raise ConfigurationError(
                f"Retention parameter for {kind.value} must be a number",
                config_key="policy_parameter",
            )
        try:
            value = int(parameter)
        except (TypeError, ValueError):
            raise ConfigurationError(
                f"Retention parameter for {kind.value} must be an integer, got {parameter!r}",
                config_key="policy_parameter",
            ) from None
        if value < 0:
            raise ConfigurationError(
                f"Retention parameter for {kind.value} must not be negative, got {value}",
                config_key="policy_parameter",
            )
        return value

    @classmethod
    def create(
        cls,
        kind: RetentionKind | str | None = None,
        parameter: Any = None,
    ) -> RetentionPolicy | None:
        """
        Create a retention policy.

        Args:
            kind: Retention rule to apply
            parameter: Threshold for the rule (count, days or megabytes)

        Returns:
            The configured policy, or None when both arguments are absent

        Raises:
            ConfigurationError: If only one of the two arguments is given,
                the kind is unknown, or the parameter is not a valid count
        """
        if kind is not None and parameter is None:
            parsed = cls.parse_kind(kind)
            raise ConfigurationError(
                f"A retention parameter is required for policy type {parsed.value}",
                config_key="policy_parameter",
            )

        if kind is None and parameter is not None:
            raise ConfigurationError(
                "Please provide a valid retention policy type when a parameter is given",
                config_key="policy_kind",
            )

        if kind is None:
            return None

        parsed = cls.parse_kind(kind)
        threshold = cls.parse_parameter(parameter, parsed)
        return _POLICY_TYPES[parsed](threshold)


def create_policy(
    kind: RetentionKind | str | None = None,
    parameter: Any = None,
) -> RetentionPolicy | None:
    """Module-level shortcut for PolicyFactory.create."""
    return PolicyFactory.create(kind, parameter)
