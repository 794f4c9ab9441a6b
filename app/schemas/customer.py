from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class CustomerStatus(StrEnum):
    new = "new"
    contacted = "contacted"
    interested = "interested"
    not_interested = "not_interested"
    meeting_scheduled = "meeting_scheduled"
    proposal_sent = "proposal_sent"
    negotiation = "negotiation"
    won = "won"
    lost = "lost"


class CustomerSource(StrEnum):
    crawl = "crawl"
    excel = "excel"
    manual = "manual"


class ContactType(StrEnum):
    call = "call"
    message = "message"
    email = "email"
    meeting = "meeting"


class Category(StrEnum):
    buildingServices = "buildingServices"
    education = "education"
    realState = "realState"
    cosmetic = "cosmetic"
    healthcare_beauty = "healthcare&beauty"
    dentists = "dentists"
    pets = "pets"
    marketings = "marketings"
    sweets = "sweets"
    resturants = "resturants"
    other = "other"
    insurance = "insurance"
    contentcreation = "contentcreation"
    homeStaffs = "homeStaffs"
    cars = "cars"
    finance = "finance"
    transportation = "transportation"
    clothes = "clothes"
    imagination = "imagination"
    music = "music"
    exchange = "exchange"
    foodsuply = "foodsuply"
    accountant = "accountant"
    lawer = "lawer"
    athlit = "athlit"
    tourism = "tourism"
    flowe = "flowe"
    supermarket = "supermarket"


class Note(BaseModel):
    content: str
    createdAt: datetime
    createdBy: str | None = None


class ContactEntry(BaseModel):
    date: datetime
    type: ContactType
    notes: str
    createdBy: str | None = None


class CustomerDocument(BaseModel):
    """A customer as stored, before it has an id."""

    model_config = ConfigDict(use_enum_values=True, validate_default=True)

    name: str
    phoneNumber: str | None = None
    email: str | None = None
    instagram: str | None = None
    address: str | None = None
    description: str | None = None
    country: str = "Unknown"
    category: Category = Category.other
    status: CustomerStatus = CustomerStatus.new
    source: CustomerSource
    notes: list[Note] = []
    contactHistory: list[ContactEntry] = []
    lastContactedAt: datetime | None = None
    createdAt: datetime | None = None
    updatedAt: datetime | None = None


class Customer(CustomerDocument):
    id: str


class CustomerCreate(BaseModel):
    name: str | None = None
    phoneNumber: str | None = None
    email: str | None = None
    instagram: str | None = None
    address: str | None = None
    description: str | None = None
    country: str | None = None
    category: Category | None = None
    source: CustomerSource = CustomerSource.manual


class CustomerUpdate(BaseModel):
    name: str | None = None
    phoneNumber: str | None = None
    email: str | None = None
    instagram: str | None = None
    address: str | None = None
    description: str | None = None
    country: str | None = None
    category: Category | None = None
    status: CustomerStatus | None = None


class NoteInput(BaseModel):
    content: str
    createdBy: str | None = None


class ContactInput(BaseModel):
    type: ContactType
    notes: str
    date: datetime | None = None
    createdBy: str | None = None


class StatusInput(BaseModel):
    status: CustomerStatus


class CustomerActionRequest(BaseModel):
    action: str
    data: dict = {}


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int


class CustomerListResponse(BaseModel):
    success: bool = True
    customers: list[Customer]
    pagination: Pagination


class CustomerResponse(BaseModel):
    success: bool = True
    customer: Customer


class DeleteResponse(BaseModel):
    success: bool = True
    message: str


class ImportFilters(BaseModel):
    country: str | None = None
    category: str | None = None
    ids: list[str] = []


class ImportRequest(BaseModel):
    source: str
    data: list[dict] | dict | None = None
    filters: ImportFilters | None = None


class ImportResults(BaseModel):
    total: int
    imported: int
    skipped: int
    errors: int
    duplicates: list[str] = []


class ImportResponse(BaseModel):
    success: bool = True
    results: ImportResults


class DebugResponse(BaseModel):
    success: bool = True
    totalCount: int
    sampleData: dict | None = None
    fieldNames: list[str] = []
