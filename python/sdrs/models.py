"""
Core data models for retention rules and the jobs derived from them.

A retention rule is one of three variants, discriminated by ``rule_type``:
- DatasetRule: scoped to one dataset path inside a bucket
- DefaultRule: scoped to a whole bucket, minus its dataset rules
- GlobalRule: the fallback policy applied to buckets without a default rule
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from sdrs.paths import get_bucket_name, get_dataset_path


class RetentionRuleType(str, Enum):
    """Kinds of retention rules."""

    DATASET = "DATASET"
    DEFAULT = "DEFAULT"
    GLOBAL = "GLOBAL"


class _RetentionRuleBase(BaseModel):
    """Fields shared by every retention rule variant."""

    model_config = ConfigDict(frozen=True)

    id: int | None = Field(default=None, description="Rule id, None for user-triggered runs")
    version: int | None = Field(default=None, description="Rule version, None for user-triggered runs")
    project_id: str = Field(default="", description="Owning cloud project id")
    data_storage_name: str = Field(..., description="Storage location, e.g. gs://bucket/dataset")
    retention_period_in_days: int = Field(..., ge=0, description="Days before data becomes eligible")
    is_active: bool = Field(default=True, description="Whether the rule is in force")

    @property
    def type(self) -> RetentionRuleType:
        """The rule type as an enum member."""
        return RetentionRuleType(self.rule_type)  # type: ignore[attr-defined]

    @property
    def bucket_name(self) -> str:
        """Bucket the rule applies to."""
        return get_bucket_name(self.data_storage_name)

    @property
    def dataset_path(self) -> str:
        """Dataset path inside the bucket, empty for a whole bucket."""
        return get_dataset_path(self.data_storage_name)


class DatasetRule(_RetentionRuleBase):
    """Retention rule for a single dataset within a bucket."""

    rule_type: Literal["DATASET"] = "DATASET"
    dataset_name: str | None = Field(default=None, description="Display name of the dataset")


class DefaultRule(_RetentionRuleBase):
    """Retention rule covering a whole bucket except its dataset rules."""

    rule_type: Literal["DEFAULT"] = "DEFAULT"


class GlobalRule(_RetentionRuleBase):
    """Fallback retention rule applied where no default rule exists."""

    rule_type: Literal["GLOBAL"] = "GLOBAL"


RetentionRule = Annotated[
    Union[DatasetRule, DefaultRule, GlobalRule],
    Field(discriminator="rule_type"),
]

_rule_adapter: TypeAdapter[Any] = TypeAdapter(RetentionRule)


def parse_rule(data: dict[str, Any]) -> DatasetRule | DefaultRule | GlobalRule:
    """Validate a mapping into the rule variant named by its ``rule_type``."""
    return _rule_adapter.validate_python(data)


class RetentionJob(BaseModel):
    """
    Snapshot of a rule's identity tied to one external transfer job.

    Built when a job is created or reconciled and never modified afterwards.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="External transfer job name")
    retention_rule_id: int | None = Field(default=None, description="Id of the source rule")
    retention_rule_project_id: str = Field(default="", description="Project id of the source rule")
    retention_rule_data_storage_name: str = Field(..., description="Storage name of the source rule")
    retention_rule_type: RetentionRuleType = Field(..., description="Type of the source rule")
    retention_rule_version: int | None = Field(default=None, description="Version of the source rule")
