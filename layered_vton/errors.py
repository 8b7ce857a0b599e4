"""Error taxonomy for remote try-on jobs."""

from typing import Any


class TryOnError(Exception):
    """Base class for every failure of a single garment application."""


class NetworkError(TryOnError):
    """Transient transport or HTTP failure talking to the transform API."""


class SubmissionRejected(TryOnError):
    """The transform API refused to create a job."""


class UpstreamJobFailed(TryOnError):
    """The job reached the ``failed`` state upstream."""

    def __init__(self, message: str, job_id: str | None = None):
        super().__init__(message)
        self.job_id = job_id


class ResponseShapeUnrecognized(TryOnError):
    """The job completed but no known payload shape carried an image."""

    def __init__(self, job_id: str, payload: dict[str, Any]):
        super().__init__(f"Job {job_id} completed but no image URL found in response")
        self.job_id = job_id
        self.payload = payload


class JobTimeout(TryOnError, TimeoutError):
    """Polling budget exhausted while the job was still non-terminal.

    The job may still finish upstream; this is not a failure verdict.
    """

    def __init__(self, job_id: str, attempts: int, elapsed: float):
        super().__init__(
            f"Polling timeout after {attempts} attempts ({elapsed:.0f}s) - "
            f"job {job_id} may still be processing"
        )
        self.job_id = job_id
        self.attempts = attempts
        self.elapsed = elapsed
