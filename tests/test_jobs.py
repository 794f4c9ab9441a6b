"""Tests for JobStore lifecycle and eviction."""

from datetime import datetime, timezone

from app.jobs import JobStatus, JobStore
from app.schemas.crawl import CrawlResult

URL = "https://example.com/list"


def _result() -> CrawlResult:
    return CrawlResult(
        url=URL,
        businesses=[],
        count=0,
        totalPages=1,
        pagesCrawled=1,
        crawledAt=datetime.now(timezone.utc),
    )


def test_create_job_is_pending():
    store = JobStore()
    job = store.create_job(URL, crawl_all_pages=True)

    assert job.status == JobStatus.pending
    assert job.url == URL
    assert job.crawlAllPages is True
    assert job.finishedAt is None
    assert store.get_job(job.jobId) is job


def test_job_ids_are_unique():
    store = JobStore()
    ids = {store.create_job(URL).jobId for _ in range(50)}
    assert len(ids) == 50


def test_get_unknown_job():
    assert JobStore().get_job("missing") is None


def test_job_lifecycle_completed():
    store = JobStore()
    job = store.create_job(URL)

    store.mark_running(job.jobId)
    assert job.status == JobStatus.running

    result = _result()
    store.mark_completed(job.jobId, result)
    assert job.status == JobStatus.completed
    assert job.result is result
    assert job.finishedAt is not None


def test_job_lifecycle_failed():
    store = JobStore()
    job = store.create_job(URL)
    store.mark_running(job.jobId)
    store.mark_failed(job.jobId, "Website not found")

    assert job.status == JobStatus.failed
    assert job.error == "Website not found"
    assert job.result is None
    assert job.finishedAt is not None


def test_marking_unknown_job_is_ignored():
    store = JobStore()
    store.mark_running("missing")
    store.mark_completed("missing", _result())
    store.mark_failed("missing", "boom")
    assert store.get_job("missing") is None


def test_eviction_removes_earliest_submitted_finished_jobs():
    store = JobStore(max_jobs=2)
    first = store.create_job(URL)
    second = store.create_job(URL)
    store.mark_failed(second.jobId, "boom")
    store.mark_completed(first.jobId, _result())

    store.create_job(URL)

    assert store.get_job(first.jobId) is None
    assert store.get_job(second.jobId) is not None


def test_eviction_keeps_unfinished_jobs():
    store = JobStore(max_jobs=1)
    running = store.create_job(URL)
    store.mark_running(running.jobId)

    pending = store.create_job(URL)

    assert store.get_job(running.jobId) is not None
    assert store.get_job(pending.jobId) is not None


def test_store_can_exceed_bound_while_jobs_are_active():
    store = JobStore(max_jobs=2)
    jobs = [store.create_job(URL) for _ in range(3)]

    assert all(store.get_job(j.jobId) is not None for j in jobs)

    store.mark_completed(jobs[1].jobId, _result())
    store.create_job(URL)

    assert store.get_job(jobs[1].jobId) is None
    assert store.get_job(jobs[0].jobId) is not None
