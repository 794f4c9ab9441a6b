import asyncio
import logging

from fastapi import APIRouter, HTTPException

from app.dependencies import CrawlerDep, JobStoreDep
from app.jobs import CrawlJob, JobStore
from app.schemas.crawl import CrawlRequest, CrawlResult
from app.schemas.responses import JobSubmittedResponse
from app.services.crawler import CrawlerService, validate_url

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/crawl")

# Strong references so running jobs are not garbage collected
_background_tasks: set[asyncio.Task] = set()


async def _run_crawl(
    job_id: str,
    service: CrawlerService,
    store: JobStore,
    url: str,
    crawl_all_pages: bool,
) -> None:
    store.mark_running(job_id)
    try:
        result = await service.crawl(url, crawl_all_pages)
        store.mark_completed(job_id, result)
    except Exception as exc:
        logger.exception("Crawl job %s failed", job_id)
        store.mark_failed(job_id, getattr(exc, "message", None) or str(exc))


@router.post("", response_model=CrawlResult)
async def crawl(request: CrawlRequest, service: CrawlerDep) -> CrawlResult:
    return await service.crawl(request.url, request.crawlAllPages)


@router.post("/jobs", response_model=JobSubmittedResponse, status_code=202)
async def submit_crawl_job(
    request: CrawlRequest,
    service: CrawlerDep,
    store: JobStoreDep,
) -> JobSubmittedResponse:
    url = validate_url(request.url)
    job = store.create_job(url, request.crawlAllPages)
    task = asyncio.create_task(
        _run_crawl(job.jobId, service, store, url, request.crawlAllPages)
    )
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
    return JobSubmittedResponse(
        jobId=job.jobId,
        status=job.status,
        message="Crawl job submitted",
    )


@router.get("/jobs/{job_id}", response_model=CrawlJob)
async def get_crawl_job(job_id: str, store: JobStoreDep) -> CrawlJob:
    job = store.get_job(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Job not found")
    return job
