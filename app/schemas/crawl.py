from datetime import datetime

from pydantic import BaseModel


class CrawlRequest(BaseModel):
    url: str | None = None
    crawlAllPages: bool = False


class BusinessRecord(BaseModel):
    name: str = ""
    phoneNumber: str = ""
    instagram: str = ""  # "@handle" when derived from a profile URL
    address: str = ""
    email: str = ""
    description: str = ""


class CrawlResult(BaseModel):
    url: str
    businesses: list[BusinessRecord] = []
    count: int
    totalPages: int
    pagesCrawled: int
    crawledAt: datetime
