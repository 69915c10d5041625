"""
Storage Transfer JSON REST client.

Talks to ``transferJobs`` endpoints with bearer-token authentication.
Transport, HTTP and decoding failures are raised as TransferServiceError;
a 404 on lookup is reported as a missing job.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any
from urllib.error import HTTPError, URLError
from urllib.parse import quote, urlencode
from urllib.request import Request, urlopen

import structlog

from sdrs.exceptions import TransferServiceError
from sdrs.transfer.base import TransferClient
from sdrs.transfer.models import TransferJob

if TYPE_CHECKING:
    from collections.abc import Callable

    from sdrs.config import TransferApiConfig

logger = structlog.get_logger(__name__)

UPDATE_FIELD_MASK = "description,transfer_spec"


class RestTransferClient(TransferClient):
    """
    Transfer client over HTTPS.

    Holds no mutable state after construction, so one instance can be
    shared by concurrent rule executions.
    """

    def __init__(
        self,
        config: TransferApiConfig,
        token_provider: Callable[[], str] | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            config: Endpoint, timeout and static token settings.
            token_provider: Callable returning a fresh OAuth2 access token.
                Takes precedence over ``config.access_token``.
        """
        self._config = config
        self._token_provider = token_provider
        self._base_url = config.base_url.rstrip("/")
        self._logger = logger.bind(base_url=self._base_url)

    def create_job(self, job: TransferJob) -> TransferJob:
        body = job.model_copy(update={"name": None}).to_api_dict()
        data = self._request("create", "POST", f"{self._base_url}/transferJobs", body)
        return TransferJob.from_api_dict(data)

    def get_job(self, project_id: str, job_name: str) -> TransferJob | None:
        query = urlencode({"projectId": project_id})
        url = f"{self._job_url(job_name)}?{query}"
        try:
            data = self._request("get", "GET", url)
        except TransferServiceError as e:
            if e.context.get("status") == 404:
                return None
            raise
        return TransferJob.from_api_dict(data)

    def update_job(self, job: TransferJob) -> TransferJob:
        if not job.name:
            raise ValueError("Cannot update a transfer job without a name")

        body = {
            "projectId": job.project_id,
            "transferJob": job.to_api_dict(),
            "updateTransferJobFieldMask": UPDATE_FIELD_MASK,
        }
        data = self._request("update", "PATCH", self._job_url(job.name), body)
        return TransferJob.from_api_dict(data)

    def _job_url(self, job_name: str) -> str:
        if not job_name.startswith("transferJobs/"):
            job_name = f"transferJobs/{job_name}"
        return f"{self._base_url}/{quote(job_name, safe='/')}"

    def _build_headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": self._config.user_agent,
        }

        token = self._token_provider() if self._token_provider else self._config.access_token
        if token:
            headers["Authorization"] = f"Bearer {token}"

        return headers

    def _request(
        self,
        operation: str,
        method: str,
        url: str,
        payload: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Send a request and decode the JSON response.

        Raises:
            TransferServiceError: On connection failure, non-2xx status or
                an undecodable body.
        """
        data = json.dumps(payload).encode("utf-8") if payload is not None else None
        request = Request(url, data=data, headers=self._build_headers(), method=method)

        try:
            with urlopen(request, timeout=self._config.timeout_seconds) as response:
                body = response.read().decode("utf-8")
        except HTTPError as e:
            self._logger.error(
                "transfer_api_http_error",
                operation=operation,
                status_code=e.code,
                reason=str(e.reason),
            )
            raise TransferServiceError.http_error(operation, e.code, str(e.reason)) from e
        except URLError as e:
            self._logger.error(
                "transfer_api_connection_error",
                operation=operation,
                reason=str(e.reason),
            )
            raise TransferServiceError.connection_failed(url, str(e.reason)) from e

        try:
            decoded = json.loads(body) if body else {}
        except json.JSONDecodeError as e:
            raise TransferServiceError.invalid_response(operation, str(e)) from e

        if not isinstance(decoded, dict):
            raise TransferServiceError.invalid_response(operation, "expected a JSON object")

        return decoded
