"""
Value types mirroring the Storage Transfer ``TransferJob`` resource.

Field names are snake_case in Python and camelCase on the wire. All models
are frozen: a changed job is expressed as a new value built with
``model_copy(update=...)``.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

SECONDS_PER_DAY = 86400


def retention_days_to_duration(days: int) -> str:
    """Render a retention period as a protobuf duration string, e.g. ``"86400s"``."""
    return f"{days * SECONDS_PER_DAY}s"


class TransferJobStatus(str, Enum):
    """Lifecycle state of a transfer job."""

    STATUS_UNSPECIFIED = "STATUS_UNSPECIFIED"
    ENABLED = "ENABLED"
    DISABLED = "DISABLED"
    DELETED = "DELETED"


class _TransferModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class Date(_TransferModel):
    """Calendar date."""

    year: int
    month: int
    day: int

    @classmethod
    def from_datetime(cls, value: datetime) -> Date:
        return cls(year=value.year, month=value.month, day=value.day)


class TimeOfDay(_TransferModel):
    """Wall-clock time in UTC."""

    hours: int = 0
    minutes: int = 0
    seconds: int = 0

    @classmethod
    def from_datetime(cls, value: datetime) -> TimeOfDay:
        return cls(hours=value.hour, minutes=value.minute, seconds=value.second)


class Schedule(_TransferModel):
    """When a job runs. A missing end date makes the job recur daily."""

    schedule_start_date: Date
    schedule_end_date: Date | None = None
    start_time_of_day: TimeOfDay | None = None


class GcsData(_TransferModel):
    """A bucket endpoint."""

    bucket_name: str


class ObjectConditions(_TransferModel):
    """Which objects a job selects."""

    include_prefixes: tuple[str, ...] | None = None
    exclude_prefixes: tuple[str, ...] | None = None
    min_time_elapsed_since_last_modification: str | None = None


class TransferOptions(_TransferModel):
    """Post-transfer behaviour."""

    delete_objects_from_source_after_transfer: bool = False
    overwrite_objects_already_existing_in_sink: bool = False


class TransferSpec(_TransferModel):
    """Source, sink and object selection of a job."""

    gcs_data_source: GcsData
    gcs_data_sink: GcsData
    object_conditions: ObjectConditions = Field(default_factory=ObjectConditions)
    transfer_options: TransferOptions = Field(default_factory=TransferOptions)


class TransferJob(_TransferModel):
    """A transfer job as held by the external service."""

    name: str | None = None
    description: str = ""
    project_id: str = ""
    transfer_spec: TransferSpec
    schedule: Schedule | None = None
    status: TransferJobStatus = TransferJobStatus.ENABLED

    @property
    def source_bucket(self) -> str:
        return self.transfer_spec.gcs_data_source.bucket_name

    @property
    def destination_bucket(self) -> str:
        return self.transfer_spec.gcs_data_sink.bucket_name

    @property
    def object_conditions(self) -> ObjectConditions:
        return self.transfer_spec.object_conditions

    def to_api_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase JSON body the service expects."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def from_api_dict(cls, data: dict[str, Any]) -> TransferJob:
        """Build a job from a service response body."""
        return cls.model_validate(data)
