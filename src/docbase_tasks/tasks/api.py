"""HTTP client for the document base start-job and status endpoints."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import httpx

from docbase_tasks.tasks.errors import ApiAuthError
from docbase_tasks.tasks.models import JobKind

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_MAX_RETRIES = 3

START_JOB_PATHS: dict[JobKind, str] = {
    JobKind.CREATE: "/core/document_base",
    JobKind.LOAD: "/core/document_base/load",
    JobKind.INTERACTIVE: "/core/document_base/interactive",
    JobKind.ORDER_NUGGETS: "/core/document_base/order/nugget",
    JobKind.CONFIRM_MATCH: "/core/document_base/confirm/nugget/match",
    JobKind.CONFIRM_CUSTOM: "/core/document_base/confirm/nugget/custom",
}


@dataclass(slots=True, frozen=True)
class StartJobParams:
    """Form parameters shared by every start-job endpoint."""

    organization_id: int
    base_name: str
    document_ids: tuple[int, ...] = ()
    attributes: tuple[str, ...] = ()
    document_name: str | None = None
    document_content: str | None = None
    nugget_text: str | None = None
    start_index: int | None = None
    end_index: int | None = None
    interactive_task_id: str | None = None

    def to_form(self, kind: JobKind) -> dict[str, str]:
        form = {
            "organisationId": str(self.organization_id),
            "baseName": self.base_name,
        }
        if kind is JobKind.CREATE:
            form["document_ids"] = ",".join(str(document_id) for document_id in self.document_ids)
            form["attributes"] = ",".join(self.attributes)
        if kind in (JobKind.ORDER_NUGGETS, JobKind.CONFIRM_MATCH, JobKind.CONFIRM_CUSTOM):
            form["documentName"] = _required(self.document_name, "document_name", kind)
            form["documentContent"] = _required(self.document_content, "document_content", kind)
        if kind in (JobKind.CONFIRM_MATCH, JobKind.CONFIRM_CUSTOM):
            form["nuggetText"] = _required(self.nugget_text, "nugget_text", kind)
            form["startIndex"] = str(_required(self.start_index, "start_index", kind))
            form["endIndex"] = str(_required(self.end_index, "end_index", kind))
            form["interactiveCallTaskId"] = _required(
                self.interactive_task_id,
                "interactive_task_id",
                kind,
            )
        return form


def _required(value: Any, name: str, kind: JobKind) -> Any:
    if value is None:
        raise ValueError(f"{name} is required for {kind.value} jobs")
    return value


class DocbaseApiClient:
    """Thin httpx wrapper; every transport problem is logged and reported as ``None``."""

    def __init__(
        self,
        base_url: str,
        *,
        auth_token: str | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        max_retries: int = DEFAULT_MAX_RETRIES,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._auth_token = auth_token
        self._client = httpx.Client(
            timeout=httpx.Timeout(timeout_seconds, connect=10.0),
            transport=transport or httpx.HTTPTransport(retries=max_retries),
        )

    @property
    def auth_token(self) -> str:
        if not self._auth_token:
            raise ApiAuthError("No auth token configured. Set DOCBASE_AUTH_TOKEN.")
        return self._auth_token

    def start_job(self, kind: JobKind, params: StartJobParams) -> str | None:
        """Start a remote job and return its task id, or ``None`` when none was issued."""

        form = params.to_form(kind)
        form["authorization"] = self.auth_token
        url = f"{self.base_url}{START_JOB_PATHS[kind]}"
        payload = self._request_json("POST", url, label=START_JOB_PATHS[kind], data=form)
        if not isinstance(payload, Mapping):
            return None
        task_id = payload.get("task_id")
        if not isinstance(task_id, str) or not task_id.strip():
            logger.warning("Start %s job for %s returned no task id", kind.value, params.base_name)
            return None
        return task_id

    def get_job_status(self, task_id: str) -> Any | None:
        """Fetch the raw status document for a task; ``None`` on transport failure."""

        url = (
            f"{self.base_url}/core/status/"
            f"{quote(self.auth_token, safe='')}/{quote(task_id, safe='')}"
        )
        return self._request_json("GET", url, label=f"/core/status/<token>/{task_id}")

    def _request_json(self, method: str, url: str, *, label: str, **kwargs: Any) -> Any | None:
        # ``label`` stands in for the URL in logs; status URLs embed the token.
        try:
            response = self._client.request(method, url, **kwargs)
        except httpx.TimeoutException:
            logger.warning("Timeout calling %s %s", method, label)
            return None
        except httpx.HTTPError as exc:
            logger.warning("HTTP error calling %s %s: %s", method, label, type(exc).__name__)
            return None
        if not response.is_success:
            logger.warning("HTTP %s from %s %s", response.status_code, method, label)
            return None
        try:
            return response.json()
        except ValueError:
            logger.warning("Non-JSON response from %s %s", method, label)
            return None

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> DocbaseApiClient:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()
