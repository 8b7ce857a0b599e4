"""Client for the remote try-on transform API (submit a job, poll it to completion)."""

import asyncio
import json
import logging
import time
from typing import Any, Callable

import httpx
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..config import FashnConfig, PollingConfig
from ..errors import (
    JobTimeout,
    NetworkError,
    ResponseShapeUnrecognized,
    SubmissionRejected,
    UpstreamJobFailed,
)
from ..models import JobStatus, TryOnCategory, TryOnJob
from ..utils.response_shapes import extract_error_message, extract_image_url

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]


class FashnClient:
    """Client for interacting with the transform API's run/status endpoints."""

    def __init__(
        self,
        config: FashnConfig,
        polling: PollingConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config
        self.polling = polling or PollingConfig()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            headers = {"Content-Type": "application/json"}
            if self.config.api_key:
                headers["Authorization"] = f"Bearer {self.config.api_key}"
            self._client = httpx.AsyncClient(
                timeout=self.config.request_timeout,
                headers=headers,
                transport=self._transport,
            )
        return self._client

    async def check_connection(self) -> bool:
        """Verify the transform API is reachable."""
        try:
            response = await self.client.get(self.config.base_url)
            return response.status_code < 500
        except httpx.HTTPError:
            return False

    def _backoff(self, failures: int) -> float:
        return min(self.polling.retry_backoff * 2 ** (failures - 1), self.polling.max_backoff)

    async def _post_run(self, payload: dict[str, Any]) -> str:
        try:
            response = await self.client.post(f"{self.config.base_url}/v1/run", json=payload)
        except httpx.HTTPError as e:
            raise NetworkError(f"Failed to reach transform API: {e}") from e

        if response.status_code == 429 or response.status_code >= 500:
            raise NetworkError(f"Transform API error: {response.status_code}")
        if response.status_code >= 400:
            raise SubmissionRejected(
                f"Transform API error: {response.status_code} - {response.text[:500]}"
            )

        try:
            job_id = response.json().get("id")
        except (ValueError, AttributeError):
            job_id = None
        if not job_id:
            raise SubmissionRejected("Transform API did not return a job id")
        return str(job_id)

    async def submit(
        self,
        avatar_url: str,
        garment_url: str,
        category: TryOnCategory | str = TryOnCategory.AUTO,
    ) -> str:
        """Start a try-on job and return its id.

        Transient failures (transport errors, 429, 5xx) are retried up to
        ``submit_retries`` times; any other rejection is raised immediately.
        """
        if not avatar_url:
            raise ValueError("avatar_url is required")
        if not garment_url:
            raise ValueError("garment_url is required")
        category = TryOnCategory(category)

        payload = {
            "model_name": self.config.model_name,
            "inputs": {
                "model_image": avatar_url,
                "garment_image": garment_url,
                "moderation_level": self.config.moderation_level,
                "category": category.value,
            },
        }

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.polling.submit_retries + 1),
            wait=wait_exponential(
                multiplier=self.polling.retry_backoff, max=self.polling.max_backoff
            ),
            retry=retry_if_exception_type(NetworkError),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                job_id = await self._post_run(payload)

        logger.info("Job %s started (category=%s)", job_id, category.value)
        return job_id

    async def get_status(self, job_id: str) -> TryOnJob:
        """Fetch one status snapshot. Raises ``NetworkError`` on any transport problem."""
        try:
            response = await self.client.get(f"{self.config.base_url}/v1/status/{job_id}")
        except httpx.HTTPError as e:
            raise NetworkError(f"Status check failed: {e}") from e

        if response.status_code != 200:
            raise NetworkError(f"Status check failed: {response.status_code}")

        try:
            payload: Any = response.json()
        except ValueError as e:
            raise NetworkError(f"Status check returned invalid JSON: {e}") from e
        if not isinstance(payload, dict):
            raise NetworkError("Status check returned a non-object payload")

        raw_status = str(payload.get("status", "")).lower()
        try:
            status = JobStatus(raw_status)
        except ValueError:
            status = None

        job = TryOnJob(id=job_id, status=status, raw_status=raw_status, raw=payload)
        if status == JobStatus.COMPLETED:
            extracted = extract_image_url(payload)
            if extracted:
                shape, image_url = extracted
                job.image_url = image_url
                logger.debug("Job %s image found in %s", job_id, shape)
        elif status == JobStatus.FAILED:
            job.error = extract_error_message(payload)
        return job

    def _report_progress(self, on_progress: ProgressCallback | None, elapsed: float) -> None:
        if on_progress is None:
            return
        expected = max(self.polling.expected_duration, 1e-6)
        on_progress(round(min(elapsed / expected * 100, 95)))

    async def poll(
        self,
        job_id: str,
        max_attempts: int | None = None,
        poll_interval: float | None = None,
        on_progress: ProgressCallback | None = None,
        started_at: float | None = None,
    ) -> str:
        """Poll a job until it reaches a terminal state and return the output image URL.

        Raises:
            UpstreamJobFailed: the job failed upstream (not retried).
            ResponseShapeUnrecognized: the job completed without a recognizable image (not retried).
            JobTimeout: ``max_attempts`` or ``overall_timeout`` ran out first.
        """
        max_attempts = max_attempts or self.polling.max_attempts
        if poll_interval is None:
            poll_interval = self.polling.poll_interval
        start = started_at if started_at is not None else time.monotonic()
        deadline = start + self.polling.overall_timeout

        attempts = 0
        failures = 0
        while attempts < max_attempts and time.monotonic() < deadline:
            attempts += 1
            self._report_progress(on_progress, time.monotonic() - start)
            logger.debug("Polling job %s, attempt %d/%d", job_id, attempts, max_attempts)

            try:
                job = await self.get_status(job_id)
            except NetworkError as e:
                failures += 1
                delay = self._backoff(failures)
                logger.warning(
                    "Polling error for job %s (%dx): %s, retrying in %.1fs",
                    job_id, failures, e, delay,
                )
                if attempts < max_attempts:
                    await asyncio.sleep(delay)
                continue

            failures = 0

            if job.status == JobStatus.COMPLETED:
                if not job.image_url:
                    logger.error(
                        "Job %s completed but no image found. Full response: %s",
                        job_id, json.dumps(job.raw, default=str),
                    )
                    raise ResponseShapeUnrecognized(job_id, job.raw)
                if on_progress is not None:
                    on_progress(100)
                logger.info("Job %s completed after %d attempts", job_id, attempts)
                return job.image_url

            if job.status == JobStatus.FAILED:
                logger.error("Job %s failed: %s", job_id, job.error)
                raise UpstreamJobFailed(job.error or "Try-on job failed", job_id=job_id)

            if job.status is None:
                logger.warning("Job %s reported unknown status %r", job_id, job.raw_status)

            if attempts < max_attempts:
                await asyncio.sleep(poll_interval)

        raise JobTimeout(job_id, attempts, time.monotonic() - start)

    async def run(
        self,
        avatar_url: str,
        garment_url: str,
        category: TryOnCategory | str = TryOnCategory.AUTO,
        on_progress: ProgressCallback | None = None,
    ) -> tuple[str, str]:
        """Submit a job and wait for it. Returns ``(job_id, image_url)``."""
        start = time.monotonic()
        job_id = await self.submit(avatar_url, garment_url, category)
        image_url = await self.poll(job_id, on_progress=on_progress, started_at=start)
        return job_id, image_url

    async def close(self):
        """Close the HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
