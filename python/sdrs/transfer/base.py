"""
Client contract for the external transfer job service.

Implementations provide the three raw operations (create, get, update).
The two job shapes used for retention are assembled here so every client
submits identical bodies:
- include jobs: one-shot moves of an explicit prefix list
- recurring exclude jobs: daily moves of everything older than the
  retention period, minus the excluded prefixes
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from sdrs.transfer.models import (
    Date,
    GcsData,
    ObjectConditions,
    Schedule,
    TimeOfDay,
    TransferJob,
    TransferOptions,
    TransferSpec,
    retention_days_to_duration,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime


def build_include_job(
    project_id: str,
    source_bucket: str,
    destination_bucket: str,
    include_prefixes: Sequence[str],
    description: str,
    scheduled_time: datetime,
) -> TransferJob:
    """Build a one-shot job moving the given prefixes at ``scheduled_time``."""
    run_date = Date.from_datetime(scheduled_time)
    return TransferJob(
        description=description,
        project_id=project_id,
        transfer_spec=TransferSpec(
            gcs_data_source=GcsData(bucket_name=source_bucket),
            gcs_data_sink=GcsData(bucket_name=destination_bucket),
            object_conditions=ObjectConditions(include_prefixes=tuple(include_prefixes)),
            transfer_options=TransferOptions(delete_objects_from_source_after_transfer=True),
        ),
        schedule=Schedule(
            schedule_start_date=run_date,
            schedule_end_date=run_date,
            start_time_of_day=TimeOfDay.from_datetime(scheduled_time),
        ),
    )


def build_recurring_exclude_job(
    project_id: str,
    source_bucket: str,
    destination_bucket: str,
    exclude_prefixes: Sequence[str],
    description: str,
    scheduled_time: datetime,
    retention_in_days: int,
) -> TransferJob:
    """Build a daily job moving objects older than the retention period."""
    return TransferJob(
        description=description,
        project_id=project_id,
        transfer_spec=TransferSpec(
            gcs_data_source=GcsData(bucket_name=source_bucket),
            gcs_data_sink=GcsData(bucket_name=destination_bucket),
            object_conditions=ObjectConditions(
                exclude_prefixes=tuple(exclude_prefixes) or None,
                min_time_elapsed_since_last_modification=retention_days_to_duration(
                    retention_in_days
                ),
            ),
            transfer_options=TransferOptions(delete_objects_from_source_after_transfer=True),
        ),
        schedule=Schedule(
            schedule_start_date=Date.from_datetime(scheduled_time),
            start_time_of_day=TimeOfDay.from_datetime(scheduled_time),
        ),
    )


class TransferClient(ABC):
    """
    Abstract client for the transfer job service.

    Implementations must be safe to share between concurrent rule
    executions. No retries are performed at this layer.
    """

    @abstractmethod
    def create_job(self, job: TransferJob) -> TransferJob:
        """
        Create a transfer job.

        Args:
            job: Job body without a name.

        Returns:
            The job as stored by the service, including its name.

        Raises:
            TransferServiceError: If the service call fails.
        """

    @abstractmethod
    def get_job(self, project_id: str, job_name: str) -> TransferJob | None:
        """
        Fetch a transfer job.

        Returns:
            The live job, or None if the service does not know it.

        Raises:
            TransferServiceError: If the service call fails.
        """

    @abstractmethod
    def update_job(self, job: TransferJob) -> TransferJob:
        """
        Replace the description and transfer spec of an existing job.

        Args:
            job: Full job value carrying the name and project id to update.

        Returns:
            The job as stored by the service after the update.

        Raises:
            TransferServiceError: If the service call fails.
        """

    def create_include_job(
        self,
        project_id: str,
        source_bucket: str,
        destination_bucket: str,
        include_prefixes: Sequence[str],
        description: str,
        scheduled_time: datetime,
    ) -> TransferJob:
        """Create a one-shot job moving an explicit list of prefixes."""
        return self.create_job(
            build_include_job(
                project_id,
                source_bucket,
                destination_bucket,
                include_prefixes,
                description,
                scheduled_time,
            )
        )

    def create_recurring_exclude_job(
        self,
        project_id: str,
        source_bucket: str,
        destination_bucket: str,
        exclude_prefixes: Sequence[str],
        description: str,
        scheduled_time: datetime,
        retention_in_days: int,
    ) -> TransferJob:
        """Create a daily job selecting by age, skipping excluded prefixes."""
        return self.create_job(
            build_recurring_exclude_job(
                project_id,
                source_bucket,
                destination_bucket,
                exclude_prefixes,
                description,
                scheduled_time,
                retention_in_days,
            )
        )
