from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from enum import StrEnum

from pydantic import BaseModel

from app.schemas.crawl import CrawlResult

logger = logging.getLogger(__name__)


class JobStatus(StrEnum):
    pending = "pending"
    running = "running"
    completed = "completed"
    failed = "failed"


class CrawlJob(BaseModel):
    jobId: str
    status: JobStatus
    url: str
    crawlAllPages: bool = False
    createdAt: datetime
    finishedAt: datetime | None = None
    result: CrawlResult | None = None
    error: str | None = None


class JobStore:
    """In-memory registry of background crawl jobs.

    Jobs are kept in submission order. Once the store holds more than
    ``max_jobs`` entries, the earliest-submitted finished jobs are dropped;
    pending and running jobs are never dropped.
    """

    def __init__(self, max_jobs: int = 1000) -> None:
        self._jobs: dict[str, CrawlJob] = {}
        self._max_jobs = max_jobs

    def create_job(self, url: str, crawl_all_pages: bool = False) -> CrawlJob:
        job = CrawlJob(
            jobId=uuid.uuid4().hex[:12],
            status=JobStatus.pending,
            url=url,
            crawlAllPages=crawl_all_pages,
            createdAt=datetime.now(timezone.utc),
        )
        self._jobs[job.jobId] = job
        self._prune()
        return job

    def get_job(self, job_id: str) -> CrawlJob | None:
        return self._jobs.get(job_id)

    def mark_running(self, job_id: str) -> None:
        self._update(job_id, status=JobStatus.running)

    def mark_completed(self, job_id: str, result: CrawlResult) -> None:
        self._update(
            job_id,
            status=JobStatus.completed,
            result=result,
            finishedAt=datetime.now(timezone.utc),
        )

    def mark_failed(self, job_id: str, error: str) -> None:
        self._update(
            job_id,
            status=JobStatus.failed,
            error=error,
            finishedAt=datetime.now(timezone.utc),
        )

    def _update(self, job_id: str, **changes) -> None:
        job = self._jobs.get(job_id)
        if job is None:
            logger.warning("Ignoring update for unknown crawl job %s", job_id)
            return
        for field, value in changes.items():
            setattr(job, field, value)

    def _prune(self) -> None:
        overflow = len(self._jobs) - self._max_jobs
        if overflow <= 0:
            return
        finished = [job_id for job_id, job in self._jobs.items() if job.finishedAt is not None]
        for job_id in finished[:overflow]:
            del self._jobs[job_id]
