"""Remote try-on job models."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class JobStatus(str, Enum):
    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class TryOnJob(BaseModel):
    """Snapshot of one remote job as reported by a status call."""

    id: str
    status: JobStatus | None = None  # None when upstream reports an unknown status
    raw_status: str | None = None
    image_url: str | None = None
    error: str | None = None
    raw: dict[str, Any] = Field(default_factory=dict)
