from typing import Annotated

from fastapi import Depends, Request

from app.jobs import JobStore
from app.services.crawler import CrawlerService
from app.services.customers import CustomerService
from app.services.leads import LeadStoreService


def get_crawler_service(request: Request) -> CrawlerService:
    return request.app.state.crawler_service


def get_lead_store(request: Request) -> LeadStoreService:
    return request.app.state.lead_store


def get_customer_service(request: Request) -> CustomerService:
    return request.app.state.customer_service


def get_job_store(request: Request) -> JobStore:
    return request.app.state.job_store


CrawlerDep = Annotated[CrawlerService, Depends(get_crawler_service)]
LeadStoreDep = Annotated[LeadStoreService, Depends(get_lead_store)]
CustomerDep = Annotated[CustomerService, Depends(get_customer_service)]
JobStoreDep = Annotated[JobStore, Depends(get_job_store)]
