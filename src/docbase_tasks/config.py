"""Runtime configuration for the document base job client."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import urlparse


@dataclass(slots=True)
class ApiSettings:
    """Remote service connection settings."""

    base_url: str = "http://localhost:8000"
    auth_token: str = ""
    request_timeout_seconds: float = 30.0
    max_retries: int = 3


@dataclass(slots=True)
class PollingSettings:
    """Status polling cadence and limits."""

    interval_seconds: float = 1.0
    job_timeout_seconds: float = 1_800.0


@dataclass(slots=True)
class Settings:
    """Application settings grouped by concern."""

    scratch_path: Path = Path(".docbase_tasks.json")
    api: ApiSettings = field(default_factory=ApiSettings)
    polling: PollingSettings = field(default_factory=PollingSettings)

    @classmethod
    def from_env(cls, scratch_path: Path | None = None) -> Settings:
        """Load settings from environment with defaults for a local backend."""

        return cls(
            scratch_path=scratch_path
            or Path(os.getenv("DOCBASE_SCRATCH_PATH", ".docbase_tasks.json")),
            api=ApiSettings(
                base_url=os.getenv("DOCBASE_API_URL", "http://localhost:8000").strip(),
                auth_token=os.getenv("DOCBASE_AUTH_TOKEN", "").strip(),
                request_timeout_seconds=_env_float("DOCBASE_REQUEST_TIMEOUT_SECONDS", 30.0),
                max_retries=_env_int("DOCBASE_MAX_RETRIES", 3),
            ),
            polling=PollingSettings(
                interval_seconds=_env_float("DOCBASE_POLL_INTERVAL_SECONDS", 1.0),
                job_timeout_seconds=_env_float("DOCBASE_JOB_TIMEOUT_SECONDS", 1800.0),
            ),
        )

    def validate(self) -> None:
        """Raise configuration error for values the client cannot work with."""

        parsed = urlparse(self.api.base_url)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            raise ValueError(
                f"Invalid DOCBASE_API_URL: {self.api.base_url!r}. "
                "Expected absolute http(s) URL.",
            )
        if self.api.request_timeout_seconds <= 0:
            raise ValueError("DOCBASE_REQUEST_TIMEOUT_SECONDS must be > 0.")
        if self.api.max_retries < 0:
            raise ValueError("DOCBASE_MAX_RETRIES must be >= 0.")
        if self.polling.interval_seconds <= 0:
            raise ValueError("DOCBASE_POLL_INTERVAL_SECONDS must be > 0.")
        if self.polling.job_timeout_seconds <= 0:
            raise ValueError("DOCBASE_JOB_TIMEOUT_SECONDS must be > 0.")

    def validate_for_jobs(self) -> None:
        """Additionally require credentials for starting and polling jobs."""

        self.validate()
        if not self.api.auth_token:
            raise ValueError("DOCBASE_AUTH_TOKEN is required to start or inspect jobs.")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as error:
        raise ValueError(f"Invalid {name} value: {raw!r} (expected a number)") from error


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as error:
        raise ValueError(f"Invalid {name} value: {raw!r} (expected an integer)") from error
