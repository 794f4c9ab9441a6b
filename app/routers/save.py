from fastapi import APIRouter, Body
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from app.dependencies import LeadStoreDep
from app.schemas.crawl import BusinessRecord
from app.schemas.save import BulkSaveRequest

router = APIRouter(prefix="/api")


def _parse(model: type[BaseModel], body: dict):
    try:
        return model.model_validate(body)
    except ValidationError as exc:
        raise RequestValidationError(exc.errors()) from exc


@router.post("/save")
async def save(store: LeadStoreDep, body: dict = Body(...)) -> JSONResponse:
    """Save crawled businesses.

    A ``businesses`` list selects bulk mode (country and category required);
    any other body is saved as a single business.
    """
    if isinstance(body.get("businesses"), list):
        result = await store.save_many(_parse(BulkSaveRequest, body))
        return JSONResponse(
            status_code=200,
            content=result.model_dump(mode="json", exclude_none=True),
        )

    saved = await store.save_one(_parse(BusinessRecord, body))
    return JSONResponse(status_code=201, content=saved.model_dump(mode="json"))
