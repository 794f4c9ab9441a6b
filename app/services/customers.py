import logging
import math
import re
from contextlib import contextmanager
from datetime import datetime, timezone

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import ValidationError
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.errors import PyMongoError

from app.exceptions.custom import (
    CustomerNotFoundError,
    DuplicateRecordError,
    InvalidInputError,
    StoreError,
)
from app.mappers.customer_mapper import (
    customer_from_document,
    customer_from_excel_row,
    customer_from_lead,
    customer_from_manual,
)
from app.schemas.customer import (
    ContactInput,
    Customer,
    CustomerCreate,
    CustomerDocument,
    CustomerListResponse,
    CustomerStatus,
    CustomerUpdate,
    ImportRequest,
    ImportResults,
    NoteInput,
    Pagination,
    StatusInput,
)
from app.services.leads import LeadStoreService

logger = logging.getLogger(__name__)

CUSTOMERS_COLLECTION = "customers"

_MAX_LIMIT = 500


def _object_id(customer_id: str | None) -> ObjectId:
    if not customer_id:
        raise InvalidInputError("Customer ID is required in x-customer-id header")
    if not ObjectId.is_valid(customer_id):
        raise InvalidInputError("Invalid customer ID")
    return ObjectId(customer_id)


@contextmanager
def _store_errors(action: str):
    try:
        yield
    except PyMongoError as exc:
        logger.exception("Store failure while trying to %s", action)
        raise StoreError(f"Failed to {action}: {exc}") from exc


def _first_error(exc: ValidationError) -> str:
    err = exc.errors()[0]
    field = ".".join(str(p) for p in err.get("loc", ()))
    return f"{field}: {err.get('msg')}" if field else str(err.get("msg"))


def build_filter(
    status: str | None = None,
    category: str | None = None,
    country: str | None = None,
    source: str | None = None,
    search: str | None = None,
) -> dict:
    query: dict = {}
    if status:
        query["status"] = status
    if category:
        query["category"] = category
    if country:
        query["country"] = country
    if source:
        query["source"] = source
    if search:
        pattern = re.escape(search)
        query["$or"] = [
            {field: {"$regex": pattern, "$options": "i"}}
            for field in ("name", "phoneNumber", "email")
        ]
    return query


class CustomerService:
    def __init__(self, db: AsyncIOMotorDatabase, leads: LeadStoreService):
        self._collection = db[CUSTOMERS_COLLECTION]
        self._leads = leads

    async def ensure_indexes(self) -> None:
        for field in ("phoneNumber", "status", "category", "country"):
            await self._collection.create_index([(field, ASCENDING)])
        await self._collection.create_index([("createdAt", DESCENDING)])

    async def list_customers(
        self,
        *,
        status: str | None = None,
        category: str | None = None,
        country: str | None = None,
        source: str | None = None,
        search: str | None = None,
        page: int = 1,
        limit: int = 50,
    ) -> CustomerListResponse:
        page = max(page, 1)
        limit = min(max(limit, 1), _MAX_LIMIT)
        query = build_filter(status, category, country, source, search)

        with _store_errors("fetch customers"):
            total = await self._collection.count_documents(query)
            cursor = self._collection.find(
                query,
                sort=[("createdAt", DESCENDING)],
                skip=(page - 1) * limit,
                limit=limit,
            )
            docs = await cursor.to_list(length=None)

        return CustomerListResponse(
            customers=[customer_from_document(d) for d in docs],
            pagination=Pagination(
                page=page,
                limit=limit,
                total=total,
                totalPages=math.ceil(total / limit),
            ),
        )

    async def create(self, data: CustomerCreate) -> Customer:
        if not (data.name and data.phoneNumber and data.country and data.category):
            raise InvalidInputError(
                "Missing required fields: name, phoneNumber, country, category"
            )

        with _store_errors("create customer"):
            existing = await self._collection.find_one({"phoneNumber": data.phoneNumber})
        if existing is not None:
            raise DuplicateRecordError("Customer with this phone number already exists")

        now = datetime.now(timezone.utc)
        doc = {
            **data.model_dump(mode="json"),
            "status": CustomerStatus.new.value,
            "notes": [],
            "contactHistory": [],
            "createdAt": now,
            "updatedAt": now,
        }
        with _store_errors("create customer"):
            result = await self._collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        logger.info("Created customer %s (%s)", result.inserted_id, data.name)
        return customer_from_document(doc)

    async def get(self, customer_id: str | None) -> Customer:
        oid = _object_id(customer_id)
        with _store_errors("fetch customer"):
            doc = await self._collection.find_one({"_id": oid})
        if doc is None:
            raise CustomerNotFoundError()
        return customer_from_document(doc)

    async def update(self, customer_id: str | None, data: CustomerUpdate) -> Customer:
        oid = _object_id(customer_id)
        fields = data.model_dump(mode="json", exclude_unset=True, exclude_none=True)
        fields["updatedAt"] = datetime.now(timezone.utc)
        return await self._update(oid, {"$set": fields})

    async def apply_action(
        self, customer_id: str | None, action: str, data: dict
    ) -> Customer:
        """Apply a CRM action: ``add_note``, ``add_contact`` or ``update_status``."""
        oid = _object_id(customer_id)
        now = datetime.now(timezone.utc)

        try:
            if action == "add_note":
                note = NoteInput.model_validate(data)
                update = {
                    "$push": {
                        "notes": {
                            "content": note.content,
                            "createdAt": now,
                            "createdBy": note.createdBy,
                        }
                    },
                }
            elif action == "add_contact":
                contact = ContactInput.model_validate(data)
                update = {
                    "$push": {
                        "contactHistory": {
                            "date": contact.date or now,
                            "type": contact.type.value,
                            "notes": contact.notes,
                            "createdBy": contact.createdBy,
                        }
                    },
                    "$set": {"lastContactedAt": now},
                }
            elif action == "update_status":
                status = StatusInput.model_validate(data)
                update = {"$set": {"status": status.status.value}}
            else:
                raise InvalidInputError("Invalid action")
        except ValidationError as exc:
            raise InvalidInputError(_first_error(exc)) from exc

        update.setdefault("$set", {})["updatedAt"] = now
        customer = await self._update(oid, update)
        logger.info("Applied %s to customer %s", action, customer_id)
        return customer

    async def delete(self, customer_id: str | None) -> None:
        oid = _object_id(customer_id)
        with _store_errors("delete customer"):
            doc = await self._collection.find_one_and_delete({"_id": oid})
        if doc is None:
            raise CustomerNotFoundError()
        logger.info("Deleted customer %s", customer_id)

    async def _update(self, oid: ObjectId, update: dict) -> Customer:
        with _store_errors("update customer"):
            doc = await self._collection.find_one_and_update(
                {"_id": oid}, update, return_document=ReturnDocument.AFTER
            )
        if doc is None:
            raise CustomerNotFoundError()
        return customer_from_document(doc)

    async def import_customers(self, request: ImportRequest) -> ImportResults:
        """Promote saved leads, spreadsheet rows or manual entries to customers.

        Entries whose phone number is already a customer are skipped, not
        overwritten.
        """
        candidates = await self._import_candidates(request)

        valid = [c for c in candidates if c.get("name") and c.get("phoneNumber")]
        logger.info(
            "Import from %s: %d valid, %d invalid",
            request.source, len(valid), len(candidates) - len(valid),
        )
        if not valid:
            raise InvalidInputError(
                "No valid customers to import. "
                "Make sure the data has name and phoneNumber fields."
            )

        imported = 0
        errors = 0
        duplicates: list[str] = []
        for candidate in valid:
            try:
                record = CustomerDocument.model_validate(candidate)
            except ValidationError as exc:
                logger.warning(
                    "Rejected customer %r: %s", candidate.get("name"), _first_error(exc)
                )
                errors += 1
                continue

            try:
                existing = await self._collection.find_one({"phoneNumber": record.phoneNumber})
                if existing is not None:
                    duplicates.append(record.phoneNumber)
                    continue
                now = datetime.now(timezone.utc)
                await self._collection.insert_one(
                    {**record.model_dump(), "createdAt": now, "updatedAt": now}
                )
                imported += 1
            except PyMongoError:
                logger.exception("Failed to import customer %r", record.name)
                errors += 1

        return ImportResults(
            total=len(valid),
            imported=imported,
            skipped=len(duplicates),
            errors=errors,
            duplicates=duplicates,
        )

    async def _import_candidates(self, request: ImportRequest) -> list[dict]:
        if request.source == "crawl":
            query: dict = {}
            filters = request.filters
            if filters is not None:
                if filters.country:
                    query["country"] = filters.country
                if filters.category:
                    query["category"] = filters.category
                if filters.ids:
                    query["_id"] = {
                        "$in": [ObjectId(i) for i in filters.ids if ObjectId.is_valid(i)]
                    }
            try:
                leads = await self._leads.find(query)
            except PyMongoError as exc:
                raise StoreError(f"Failed to import customers: {exc}") from exc
            return [customer_from_lead(lead) for lead in leads]

        rows = request.data
        if rows is None:
            rows = []
        elif isinstance(rows, dict):
            rows = [rows]

        if request.source == "excel":
            return [customer_from_excel_row(row) for row in rows]
        if request.source == "manual":
            return [customer_from_manual(item) for item in rows]
        raise InvalidInputError("Invalid source type")
