import logging
import sys
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from motor.motor_asyncio import AsyncIOMotorClient
from starlette.exceptions import HTTPException

from app.config import Settings
from app.exceptions.custom import CrawlError, StoreError
from app.exceptions.handlers import (
    crawl_error_handler,
    http_error_handler,
    store_error_handler,
    unhandled_error_handler,
    validation_error_handler,
)
from app.jobs import JobStore
from app.routers.crawl import router as crawl_router
from app.routers.customers import router as customers_router
from app.routers.save import router as save_router
from app.services.crawler import CrawlerService
from app.services.customers import CustomerService
from app.services.leads import LeadStoreService


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = Settings()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stdout,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)

    mongo = AsyncIOMotorClient(settings.mongodb_url)
    try:
        db = mongo[settings.mongodb_database]

        lead_store = LeadStoreService(db)
        await lead_store.ensure_indexes()
        customers = CustomerService(db, lead_store)
        await customers.ensure_indexes()

        async with httpx.AsyncClient(timeout=settings.crawl_timeout) as client:
            app.state.crawler_service = CrawlerService(
                client,
                timeout=settings.crawl_timeout,
                page_delay=settings.crawl_page_delay,
                max_pages=settings.crawl_max_pages,
                user_agent=settings.crawl_user_agent,
            )
            app.state.lead_store = lead_store
            app.state.customer_service = customers
            app.state.job_store = JobStore()

            yield
    finally:
        mongo.close()


app = FastAPI(title="Lead Crawler", lifespan=lifespan)

app.add_exception_handler(CrawlError, crawl_error_handler)
app.add_exception_handler(StoreError, store_error_handler)
app.add_exception_handler(HTTPException, http_error_handler)
app.add_exception_handler(RequestValidationError, validation_error_handler)
app.add_exception_handler(Exception, unhandled_error_handler)

app.include_router(crawl_router)
app.include_router(save_router)
app.include_router(customers_router)
