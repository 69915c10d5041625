"""
Tests for retention rule and job models.

Tests cover:
- Rule variant discrimination by rule_type
- Field validation and immutability
- Derived bucket and dataset properties
"""

import pytest
from pydantic import ValidationError

from sdrs.models import (
    DatasetRule,
    DefaultRule,
    GlobalRule,
    RetentionJob,
    RetentionRuleType,
    parse_rule,
)


class TestRetentionRuleType:
    """Tests for RetentionRuleType enum."""

    def test_values(self) -> None:
        """Enum values match the rule_type tags."""
        assert RetentionRuleType.DATASET.value == "DATASET"
        assert RetentionRuleType.DEFAULT.value == "DEFAULT"
        assert RetentionRuleType.GLOBAL.value == "GLOBAL"


class TestRuleVariants:
    """Tests for the rule variants."""

    def test_dataset_rule_defaults(self) -> None:
        """Identity fields default to None and the rule is active."""
        rule = DatasetRule(data_storage_name="gs://b/d", retention_period_in_days=30)

        assert rule.id is None
        assert rule.version is None
        assert rule.project_id == ""
        assert rule.is_active is True
        assert rule.rule_type == "DATASET"
        assert rule.type == RetentionRuleType.DATASET

    def test_derived_paths(self) -> None:
        """Bucket and dataset path come from the storage name."""
        rule = DatasetRule(data_storage_name="gs://b/d/e", retention_period_in_days=1)

        assert rule.bucket_name == "b"
        assert rule.dataset_path == "d/e"

    def test_negative_retention_rejected(self) -> None:
        """Retention periods cannot be negative."""
        with pytest.raises(ValidationError):
            DefaultRule(data_storage_name="gs://b", retention_period_in_days=-1)

    def test_rules_are_frozen(self) -> None:
        """Rules cannot be mutated after construction."""
        rule = GlobalRule(data_storage_name="global", retention_period_in_days=365)
        with pytest.raises(ValidationError):
            rule.retention_period_in_days = 10

    def test_rule_type_cannot_be_mislabelled(self) -> None:
        """A variant only accepts its own tag."""
        with pytest.raises(ValidationError):
            DefaultRule(
                data_storage_name="gs://b",
                retention_period_in_days=1,
                rule_type="GLOBAL",
            )


class TestParseRule:
    """Tests for parse_rule."""

    @pytest.mark.parametrize(
        ("rule_type", "expected"),
        [
            ("DATASET", DatasetRule),
            ("DEFAULT", DefaultRule),
            ("GLOBAL", GlobalRule),
        ],
    )
    def test_discriminates_variant(self, rule_type: str, expected: type) -> None:
        """The rule_type tag selects the variant."""
        rule = parse_rule(
            {
                "rule_type": rule_type,
                "id": 3,
                "version": 1,
                "project_id": "p1",
                "data_storage_name": "gs://b/d",
                "retention_period_in_days": 7,
            }
        )

        assert isinstance(rule, expected)
        assert rule.id == 3
        assert rule.retention_period_in_days == 7

    def test_unknown_type_rejected(self) -> None:
        """An unknown tag fails validation."""
        with pytest.raises(ValidationError):
            parse_rule(
                {
                    "rule_type": "BUCKET",
                    "data_storage_name": "gs://b",
                    "retention_period_in_days": 7,
                }
            )


class TestRetentionJob:
    """Tests for RetentionJob."""

    def test_snapshot_is_frozen(self) -> None:
        """Job records cannot be mutated."""
        job = RetentionJob(
            name="transferJobs/1",
            retention_rule_id=1,
            retention_rule_project_id="p1",
            retention_rule_data_storage_name="gs://b",
            retention_rule_type=RetentionRuleType.DEFAULT,
            retention_rule_version=2,
        )

        with pytest.raises(ValidationError):
            job.name = "transferJobs/2"

    def test_equality_by_value(self) -> None:
        """Two snapshots with the same fields are equal."""
        kwargs = {
            "name": "transferJobs/1",
            "retention_rule_data_storage_name": "gs://b/d",
            "retention_rule_type": RetentionRuleType.DATASET,
        }
        assert RetentionJob(**kwargs) == RetentionJob(**kwargs)
