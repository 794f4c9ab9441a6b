from typing import Annotated

from fastapi import APIRouter, Header

from app.dependencies import CustomerDep, LeadStoreDep
from app.schemas.customer import (
    CustomerActionRequest,
    CustomerCreate,
    CustomerListResponse,
    CustomerResponse,
    CustomerUpdate,
    DebugResponse,
    DeleteResponse,
    ImportRequest,
    ImportResponse,
)

router = APIRouter(prefix="/api/crm")

CustomerIdHeader = Annotated[str | None, Header(alias="x-customer-id")]


@router.get("/customers", response_model=CustomerListResponse)
async def list_customers(
    service: CustomerDep,
    status: str | None = None,
    category: str | None = None,
    country: str | None = None,
    source: str | None = None,
    search: str | None = None,
    page: int = 1,
    limit: int = 50,
) -> CustomerListResponse:
    return await service.list_customers(
        status=status,
        category=category,
        country=country,
        source=source,
        search=search,
        page=page,
        limit=limit,
    )


@router.post("/customers", response_model=CustomerResponse, status_code=201)
async def create_customer(
    request: CustomerCreate, service: CustomerDep
) -> CustomerResponse:
    return CustomerResponse(customer=await service.create(request))


@router.get("/customer", response_model=CustomerResponse)
async def get_customer(
    service: CustomerDep, customer_id: CustomerIdHeader = None
) -> CustomerResponse:
    return CustomerResponse(customer=await service.get(customer_id))


@router.put("/customer", response_model=CustomerResponse)
async def update_customer(
    request: CustomerUpdate,
    service: CustomerDep,
    customer_id: CustomerIdHeader = None,
) -> CustomerResponse:
    return CustomerResponse(customer=await service.update(customer_id, request))


@router.patch("/customer", response_model=CustomerResponse)
async def customer_action(
    request: CustomerActionRequest,
    service: CustomerDep,
    customer_id: CustomerIdHeader = None,
) -> CustomerResponse:
    customer = await service.apply_action(customer_id, request.action, request.data)
    return CustomerResponse(customer=customer)


@router.delete("/customer", response_model=DeleteResponse)
async def delete_customer(
    service: CustomerDep, customer_id: CustomerIdHeader = None
) -> DeleteResponse:
    await service.delete(customer_id)
    return DeleteResponse(message="Customer deleted successfully")


@router.post("/import", response_model=ImportResponse)
async def import_customers(
    request: ImportRequest, service: CustomerDep
) -> ImportResponse:
    return ImportResponse(results=await service.import_customers(request))


@router.get("/debug", response_model=DebugResponse)
async def debug_leads(store: LeadStoreDep) -> DebugResponse:
    return await store.debug()
