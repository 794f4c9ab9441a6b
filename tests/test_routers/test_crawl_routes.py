import asyncio

import httpx
import respx
from httpx import AsyncClient, Response

SITE_URL = "https://listings.example.com/cafes"


def _html(*names: str, pages: int = 0) -> str:
    items = "".join(
        f'<article><h2 itemprop="name">{n}</h2><a href="tel:0{i}">call</a></article>'
        for i, n in enumerate(names)
    )
    nav = ""
    if pages:
        links = "".join(f'<a href="?page={p}">{p}</a>' for p in range(1, pages + 1))
        nav = f'<nav aria-label="Pagination">{links}</nav>'
    return f"<html><body>{items}{nav}</body></html>"


def _mock_site(url: str, html: str):
    respx.get(url).mock(
        return_value=Response(200, html=html, headers={"content-type": "text/html"})
    )


async def submit_and_wait(client: AsyncClient, json=None, timeout: float = 5.0):
    """Submit a crawl job and poll until it finishes."""
    resp = await client.post("/api/crawl/jobs", json=json)
    assert resp.status_code == 202
    job_id = resp.json()["jobId"]

    elapsed = 0.0
    interval = 0.05
    while elapsed < timeout:
        status_resp = await client.get(f"/api/crawl/jobs/{job_id}")
        assert status_resp.status_code == 200
        job = status_resp.json()
        if job["status"] in ("completed", "failed"):
            return job
        await asyncio.sleep(interval)
        elapsed += interval
    raise TimeoutError(f"Job {job_id} did not complete within {timeout}s")


# --- Synchronous crawl ---


@respx.mock
async def test_crawl_single_page(client):
    _mock_site(SITE_URL, _html("Cafe A", "Cafe B", pages=3))

    resp = await client.post("/api/crawl", json={"url": SITE_URL})

    assert resp.status_code == 200
    data = resp.json()
    assert data["url"] == SITE_URL
    assert data["count"] == 2
    assert data["totalPages"] == 1
    assert data["pagesCrawled"] == 1
    assert [b["name"] for b in data["businesses"]] == ["Cafe A", "Cafe B"]
    assert data["businesses"][0]["phoneNumber"] == "00"
    assert data["businesses"][0]["email"] == ""
    assert "crawledAt" in data


@respx.mock
async def test_crawl_all_pages(client):
    _mock_site(f"{SITE_URL}?page=2", _html("Cafe C"))
    _mock_site(f"{SITE_URL}?page=3", _html("Cafe D"))
    _mock_site(SITE_URL, _html("Cafe A", "Cafe B", pages=3))

    resp = await client.post("/api/crawl", json={"url": SITE_URL, "crawlAllPages": True})

    assert resp.status_code == 200
    data = resp.json()
    assert data["totalPages"] == 3
    assert data["pagesCrawled"] == 3
    assert data["count"] == 4


async def test_crawl_missing_url(client):
    resp = await client.post("/api/crawl", json={})
    assert resp.status_code == 400
    assert resp.json() == {"error": "URL is required"}


async def test_crawl_invalid_url(client):
    resp = await client.post("/api/crawl", json={"url": "not a url"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid URL format"}


@respx.mock
async def test_crawl_unknown_host(client):
    respx.get(SITE_URL).mock(
        side_effect=httpx.ConnectError("[Errno -3] Temporary failure in name resolution")
    )
    resp = await client.post("/api/crawl", json={"url": SITE_URL})
    assert resp.status_code == 404
    assert resp.json() == {"error": "Website not found"}


@respx.mock
async def test_crawl_timeout(client):
    respx.get(SITE_URL).mock(side_effect=httpx.ConnectTimeout("slow"))
    resp = await client.post("/api/crawl", json={"url": SITE_URL})
    assert resp.status_code == 408
    assert resp.json() == {"error": "Request timeout - website took too long to respond"}


@respx.mock
async def test_crawl_upstream_error(client):
    respx.get(SITE_URL).mock(return_value=Response(503, text="unavailable"))
    resp = await client.post("/api/crawl", json={"url": SITE_URL})
    assert resp.status_code == 500
    assert resp.json()["error"].startswith("Failed to crawl the website: ")


# --- Background jobs ---


@respx.mock
async def test_crawl_job_completes(client):
    _mock_site(SITE_URL, _html("Cafe A"))

    job = await submit_and_wait(client, json={"url": SITE_URL})

    assert job["status"] == "completed"
    assert job["url"] == SITE_URL
    assert job["result"]["count"] == 1
    assert job["finishedAt"] is not None
    assert job["error"] is None


@respx.mock
async def test_crawl_job_failure_is_recorded(client):
    respx.get(SITE_URL).mock(side_effect=httpx.ReadTimeout("slow"))

    job = await submit_and_wait(client, json={"url": SITE_URL})

    assert job["status"] == "failed"
    assert job["error"] == "Request timeout - website took too long to respond"
    assert job["result"] is None


async def test_crawl_job_rejects_invalid_url(client):
    resp = await client.post("/api/crawl/jobs", json={"url": "ftp://example.com"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid URL format"}


async def test_unknown_job(client):
    resp = await client.get("/api/crawl/jobs/doesnotexist")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Job not found"}
