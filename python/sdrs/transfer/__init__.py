"""
Transfer job service integration.

- models: frozen value types for transfer jobs
- base: the client contract and the retention job builders
- rest: HTTPS client for the Storage Transfer API
- memory: in-process client for tests and dry runs
"""

from sdrs.transfer.base import (
    TransferClient,
    build_include_job,
    build_recurring_exclude_job,
)
from sdrs.transfer.memory import InMemoryTransferClient
from sdrs.transfer.models import (
    Date,
    GcsData,
    ObjectConditions,
    Schedule,
    TimeOfDay,
    TransferJob,
    TransferJobStatus,
    TransferOptions,
    TransferSpec,
    retention_days_to_duration,
)
from sdrs.transfer.rest import RestTransferClient

__all__ = [
    "Date",
    "GcsData",
    "InMemoryTransferClient",
    "ObjectConditions",
    "RestTransferClient",
    "Schedule",
    "TimeOfDay",
    "TransferClient",
    "TransferJob",
    "TransferJobStatus",
    "TransferOptions",
    "TransferSpec",
    "build_include_job",
    "build_recurring_exclude_job",
    "retention_days_to_duration",
]
