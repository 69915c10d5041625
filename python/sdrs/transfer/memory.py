"""In-process transfer service for tests and dry runs."""

from __future__ import annotations

import itertools
import threading

from sdrs.exceptions import TransferServiceError
from sdrs.transfer.base import TransferClient
from sdrs.transfer.models import TransferJob


class InMemoryTransferClient(TransferClient):
    """
    Dict-backed transfer client.

    Jobs are keyed by (project_id, name) and named ``transferJobs/<n>``.
    Call counters let callers assert which service operations were issued.
    """

    def __init__(self) -> None:
        self._jobs: dict[tuple[str, str], TransferJob] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()
        self.create_calls = 0
        self.get_calls = 0
        self.update_calls = 0

    @property
    def jobs(self) -> list[TransferJob]:
        """All stored jobs in creation order."""
        with self._lock:
            return list(self._jobs.values())

    def create_job(self, job: TransferJob) -> TransferJob:
        with self._lock:
            self.create_calls += 1
            stored = job.model_copy(update={"name": f"transferJobs/{next(self._ids)}"})
            self._jobs[(stored.project_id, stored.name)] = stored  # type: ignore[index]
            return stored

    def get_job(self, project_id: str, job_name: str) -> TransferJob | None:
        with self._lock:
            self.get_calls += 1
            return self._jobs.get((project_id, job_name))

    def update_job(self, job: TransferJob) -> TransferJob:
        with self._lock:
            self.update_calls += 1
            key = (job.project_id, job.name or "")
            if key not in self._jobs:
                raise TransferServiceError.http_error("update", 404, "Not Found")
            current = self._jobs[key]
            stored = current.model_copy(
                update={"description": job.description, "transfer_spec": job.transfer_spec}
            )
            self._jobs[key] = stored
            return stored

    def put(self, job: TransferJob) -> TransferJob:
        """Store a job as-is, for seeding state. The job must be named."""
        if not job.name:
            raise ValueError("Seeded transfer jobs must have a name")
        with self._lock:
            self._jobs[(job.project_id, job.name)] = job
            return job

    def delete(self, project_id: str, job_name: str) -> None:
        """Forget a job, as if it were removed out of band."""
        with self._lock:
            self._jobs.pop((project_id, job_name), None)
