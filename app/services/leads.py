import logging
from datetime import datetime, timezone

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING
from pymongo.errors import DuplicateKeyError, PyMongoError

from app.exceptions.custom import DuplicateRecordError, InvalidInputError, StoreError
from app.mappers.customer_mapper import stringify_id
from app.schemas.crawl import BusinessRecord
from app.schemas.customer import DebugResponse
from app.schemas.save import (
    BulkSaveRequest,
    BulkSaveResponse,
    SavedLead,
    SaveError,
    SingleSaveResponse,
)

logger = logging.getLogger(__name__)

LEADS_COLLECTION = "leads"


def _lead_document(
    record: BusinessRecord,
    country: str | None = None,
    category: str | None = None,
) -> dict:
    now = datetime.now(timezone.utc)
    doc = {
        "name": record.name.strip(),
        "phoneNumber": record.phoneNumber,
        "instagram": record.instagram,
        "address": record.address,
        "email": record.email,
        "description": record.description,
        "createdAt": now,
        "updatedAt": now,
    }
    if country is not None:
        doc["country"] = country
    if category is not None:
        doc["category"] = str(category)
    return doc


class LeadStoreService:
    """Persists crawled businesses into the ``leads`` collection."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self._collection = db[LEADS_COLLECTION]

    async def ensure_indexes(self) -> None:
        await self._collection.create_index(
            [("name", ASCENDING), ("phoneNumber", ASCENDING)], unique=True
        )

    async def save_many(self, request: BulkSaveRequest) -> BulkSaveResponse:
        """Write each business independently, collecting per-record errors.

        All input checks run before the first write so an invalid batch
        leaves the store untouched.
        """
        if not request.businesses:
            raise InvalidInputError("No businesses to save")
        if not request.country or not request.category:
            raise InvalidInputError("Country and category are required")
        for business in request.businesses:
            if not business.name.strip():
                raise InvalidInputError("Business name is required")

        saved = 0
        errors: list[SaveError] = []
        for business in request.businesses:
            doc = _lead_document(business, request.country, request.category)
            try:
                await self._collection.insert_one(doc)
            except PyMongoError as exc:
                logger.warning("Failed to save business %r: %s", business.name, exc)
                errors.append(SaveError(name=business.name, error=str(exc)))
                continue
            saved += 1

        total = len(request.businesses)
        logger.info("Saved %d of %d businesses", saved, total)
        return BulkSaveResponse(
            message=f"Saved {saved} of {total} businesses",
            saved=saved,
            total=total,
            errors=errors or None,
        )

    async def save_one(self, record: BusinessRecord) -> SingleSaveResponse:
        if not record.name.strip():
            raise InvalidInputError("Business name is required")

        doc = _lead_document(record)
        try:
            result = await self._collection.insert_one(doc)
        except DuplicateKeyError as exc:
            raise DuplicateRecordError("This entry already exists in the database") from exc
        except PyMongoError as exc:
            raise StoreError(f"Failed to save data: {exc}") from exc

        logger.info("Saved business %r", doc["name"])
        return SingleSaveResponse(
            message="Data saved successfully",
            data=SavedLead(
                id=str(result.inserted_id),
                name=doc["name"],
                phoneNumber=doc["phoneNumber"],
                instagram=doc["instagram"],
                address=doc["address"],
                email=doc["email"],
                description=doc["description"],
            ),
        )

    async def find(self, query: dict) -> list[dict]:
        return await self._collection.find(query).to_list(length=None)

    async def debug(self) -> DebugResponse:
        count = await self._collection.count_documents({})
        sample = await self._collection.find_one()
        if sample is not None:
            sample = stringify_id(sample)
        return DebugResponse(
            totalCount=count,
            sampleData=sample,
            fieldNames=list(sample) if sample else [],
        )
