"""Tests for the retention policy factory."""

import pytest

from backup_manager.core.exceptions import ConfigurationError
from backup_manager.core.models import RetentionKind
from backup_manager.retention import (
    AgeLimitPolicy,
    CountLimitPolicy,
    PolicyFactory,
    SizeLimitPolicy,
    create_policy,
)


class TestRetentionKind:
    """Tests for RetentionKind enum."""

    def test_all_kinds_defined(self) -> None:
        actual = {k.value for k in RetentionKind}
        assert actual == {"count_limit", "age_limit", "size_limit"}

    @pytest.mark.parametrize(
        "alias,expected",
        [
            ("max_files_based", RetentionKind.COUNT_LIMIT),
            ("max_days_based", RetentionKind.AGE_LIMIT),
            ("MAX_SIZE_BASED", RetentionKind.SIZE_LIMIT),
            ("count-limit", RetentionKind.COUNT_LIMIT),
            ("AGE_LIMIT", RetentionKind.AGE_LIMIT),
        ],
    )
    def test_aliases(self, alias: str, expected: RetentionKind) -> None:
        """Legacy names and alternate spellings resolve to the closed set."""
        assert RetentionKind(alias) is expected

    def test_unknown_value(self) -> None:
        with pytest.raises(ValueError):
            RetentionKind("forever")


class TestPolicyFactorySuccess:
    """Both kind and parameter given."""

    @pytest.mark.parametrize(
        "kind,expected",
        [
            (RetentionKind.COUNT_LIMIT, CountLimitPolicy),
            (RetentionKind.AGE_LIMIT, AgeLimitPolicy),
            (RetentionKind.SIZE_LIMIT, SizeLimitPolicy),
        ],
    )
    def test_creates_matching_policy(self, kind: RetentionKind, expected: type) -> None:
        policy = PolicyFactory.create(kind, 5)
        assert isinstance(policy, expected)
        assert policy.threshold == 5

    def test_count_limit_threshold(self) -> None:
        policy = PolicyFactory.create(RetentionKind.COUNT_LIMIT, 5)
        assert policy == CountLimitPolicy(5)

    def test_string_kind_and_parameter(self) -> None:
        """Kind strings and numeric strings are coerced."""
        policy = PolicyFactory.create("max_days_based", "14")
        assert isinstance(policy, AgeLimitPolicy)
        assert policy.max_days == 14

    def test_zero_parameter_allowed(self) -> None:
        policy = PolicyFactory.create(RetentionKind.SIZE_LIMIT, 0)
        assert isinstance(policy, SizeLimitPolicy)
        assert policy.max_size_mb == 0

    def test_module_shortcut(self) -> None:
        assert create_policy("count_limit", 2) == CountLimitPolicy(2)


class TestPolicyFactoryNoPolicy:
    """Both absent disables retention."""

    def test_both_absent(self) -> None:
        assert PolicyFactory.create(None, None) is None

    def test_defaults(self) -> None:
        assert PolicyFactory.create() is None


class TestPolicyFactoryFailure:
    """Invalid pairings and values."""

    def test_kind_without_parameter(self) -> None:
        with pytest.raises(ConfigurationError, match="required"):
            PolicyFactory.create(RetentionKind.COUNT_LIMIT, None)

    def test_parameter_without_kind(self) -> None:
        with pytest.raises(ConfigurationError, match=r"valid .* type"):
            PolicyFactory.create(None, 5)

    def test_unknown_kind(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown retention policy type") as exc:
            PolicyFactory.create("keep_forever", 5)
        assert exc.value.config_key == "policy_kind"

    def test_unknown_kind_without_parameter(self) -> None:
        """An unknown kind is reported even when the parameter is also missing."""
        with pytest.raises(ConfigurationError, match="Unknown"):
            PolicyFactory.create("keep_forever", None)

    @pytest.mark.parametrize("parameter", ["ten", 2.5j, [], True])
    def test_non_numeric_parameter(self, parameter) -> None:
        with pytest.raises(ConfigurationError, match="must be"):
            PolicyFactory.create(RetentionKind.COUNT_LIMIT, parameter)

    def test_negative_parameter(self) -> None:
        with pytest.raises(ConfigurationError, match="negative"):
            PolicyFactory.create(RetentionKind.AGE_LIMIT, -1)

    def test_error_details(self) -> None:
        with pytest.raises(ConfigurationError) as exc:
            PolicyFactory.create(RetentionKind.SIZE_LIMIT, None)
        assert exc.value.to_dict()["details"] == {"config_key": "policy_parameter"}
