from app.schemas.customer import Customer, CustomerSource, CustomerStatus

# Spreadsheet header variants, first match wins
_EXCEL_COLUMNS: dict[str, tuple[str, ...]] = {
    "name": ("name", "Name"),
    "phoneNumber": ("phoneNumber", "phone", "Phone", "PhoneNumber"),
    "email": ("email", "Email"),
    "instagram": ("instagram", "Instagram"),
    "address": ("address", "Address"),
    "description": ("description", "Description"),
    "country": ("country", "Country"),
    "category": ("category", "Category"),
}


def _first_value(row: dict, keys: tuple[str, ...]) -> str:
    for key in keys:
        value = row.get(key)
        if value is not None and str(value).strip() != "":
            return str(value).strip()
    return ""


def stringify_id(doc: dict) -> dict:
    """Copy a store document with its ObjectId rendered as a string."""
    out = dict(doc)
    if "_id" in out:
        out["_id"] = str(out["_id"])
    return out


def customer_from_document(doc: dict) -> Customer:
    data = {k: v for k, v in doc.items() if k != "_id"}
    return Customer(id=str(doc["_id"]), **data)


def _new_customer(fields: dict, source: CustomerSource) -> dict:
    return {
        **fields,
        "source": source.value,
        "status": fields.get("status") or CustomerStatus.new.value,
        "notes": fields.get("notes") or [],
        "contactHistory": fields.get("contactHistory") or [],
    }


def customer_from_lead(lead: dict) -> dict:
    return _new_customer(
        {
            "name": lead.get("name") or "",
            "phoneNumber": lead.get("phoneNumber") or "",
            "email": lead.get("email"),
            "instagram": lead.get("instagram"),
            "address": lead.get("address"),
            "description": lead.get("description"),
            "country": lead.get("country") or "Unknown",
            "category": lead.get("category") or "other",
        },
        CustomerSource.crawl,
    )


def customer_from_excel_row(row: dict) -> dict:
    fields = {field: _first_value(row, keys) for field, keys in _EXCEL_COLUMNS.items()}
    fields["category"] = fields["category"] or "other"
    return _new_customer(fields, CustomerSource.excel)


def customer_from_manual(item: dict) -> dict:
    fields = {k: v for k, v in item.items() if k not in ("_id", "id", "source")}
    return _new_customer(fields, CustomerSource.manual)
