from pydantic import BaseModel

from app.schemas.crawl import BusinessRecord
from app.schemas.customer import Category


class BulkSaveRequest(BaseModel):
    businesses: list[BusinessRecord]
    country: str | None = None
    category: Category | None = None


class SaveError(BaseModel):
    name: str
    error: str


class BulkSaveResponse(BaseModel):
    success: bool = True
    message: str
    saved: int
    total: int
    errors: list[SaveError] | None = None


class SavedLead(BusinessRecord):
    id: str


class SingleSaveResponse(BaseModel):
    success: bool = True
    message: str
    data: SavedLead
