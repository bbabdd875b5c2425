"""REST: /api/contacts. Maps HTTP to ContactService and shapes the JSON envelopes."""

import logging

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from contactbook.application import (
    ContactListQuery,
    ContactService,
    DuplicateEmail,
    Invalid,
    NotFound,
    StoreError,
)
from contactbook.application.dto import DEFAULT_LIMIT, DEFAULT_PAGE
from contactbook.domain import Contact

logger = logging.getLogger(__name__)

CONTACT_NOT_FOUND = "Contact not found"

router = APIRouter(prefix="/api/contacts", tags=["contacts"])


class ContactCreateBody(BaseModel):
    # Optional here so missing fields come back as a field-level validation list.
    name: str | None = None
    email: str | None = None
    phone: str | None = None


class ContactUpdateBody(BaseModel):
    name: str | None = None
    email: str | None = None
    phone: str | None = None


class ContactItem(BaseModel):
    id: str
    name: str
    email: str
    phone: str
    created_at: str = Field(serialization_alias="createdAt")
    updated_at: str = Field(serialization_alias="updatedAt")


def get_contact_service(request: Request) -> ContactService:
    return request.app.state.contact_service


def _contact_item(contact: Contact) -> dict:
    return ContactItem(
        id=contact.id,
        name=contact.name,
        email=contact.email,
        phone=contact.phone,
        created_at=contact.created_at.isoformat(),
        updated_at=contact.updated_at.isoformat(),
    ).model_dump(by_alias=True)


def _to_int(raw: str | None, default: int) -> int:
    """Lenient int parse for query strings; junk falls back to default."""
    try:
        return int((raw or "").strip())
    except ValueError:
        return default


def _failure(
    status_code: int,
    message: str,
    *,
    errors: list[dict] | None = None,
    error: str | None = None,
) -> JSONResponse:
    content: dict = {"success": False, "message": message}
    if errors is not None:
        content["errors"] = errors
    if error is not None:
        content["error"] = error
    return JSONResponse(content=content, status_code=status_code)


def _invalid(result: Invalid) -> JSONResponse:
    return _failure(
        400,
        "Validation error",
        errors=[{"field": e.field, "message": e.message} for e in result.errors],
    )


@router.get("")
@router.get("/", include_in_schema=False)
def list_contacts(
    search: str | None = None,
    sort_by: str | None = Query(None, alias="sortBy"),
    order: str | None = None,
    page: str | None = None,
    limit: str | None = None,
    service: ContactService = Depends(get_contact_service),
):
    query = ContactListQuery(
        search=search,
        sort_by=sort_by,
        order=order,
        page=_to_int(page, DEFAULT_PAGE),
        limit=_to_int(limit, DEFAULT_LIMIT),
    )
    try:
        result = service.list_contacts(query)
    except StoreError as exc:
        logger.exception("Listing contacts failed")
        return _failure(500, "Error fetching contacts", error=str(exc))
    return {
        "success": True,
        "count": len(result.contacts),
        "totalCount": result.total_count,
        "totalPages": result.total_pages,
        "currentPage": result.current_page,
        "data": [_contact_item(c) for c in result.contacts],
    }


@router.get("/{contact_id}")
def get_contact(
    contact_id: str,
    service: ContactService = Depends(get_contact_service),
):
    try:
        result = service.get_contact(contact_id)
    except StoreError as exc:
        logger.exception("Fetching contact %s failed", contact_id)
        return _failure(500, "Error fetching contact", error=str(exc))
    if isinstance(result, NotFound):
        return _failure(404, CONTACT_NOT_FOUND)
    return {"success": True, "data": _contact_item(result)}


@router.post("")
@router.post("/", include_in_schema=False)
def create_contact(
    body: ContactCreateBody | None = None,
    service: ContactService = Depends(get_contact_service),
):
    body = body or ContactCreateBody()
    try:
        result = service.create_contact(body.name, body.email, body.phone)
    except StoreError as exc:
        logger.exception("Creating contact failed")
        return _failure(500, "Error creating contact", error=str(exc))
    if isinstance(result, Invalid):
        return _invalid(result)
    if isinstance(result, DuplicateEmail):
        return _failure(400, result.message)
    return JSONResponse(
        content={
            "success": True,
            "message": "Contact created successfully",
            "data": _contact_item(result),
        },
        status_code=201,
    )


@router.put("/{contact_id}")
def update_contact(
    contact_id: str,
    body: ContactUpdateBody | None = None,
    service: ContactService = Depends(get_contact_service),
):
    body = body or ContactUpdateBody()
    try:
        result = service.update_contact(
            contact_id, name=body.name, email=body.email, phone=body.phone
        )
    except StoreError as exc:
        logger.exception("Updating contact %s failed", contact_id)
        return _failure(500, "Error updating contact", error=str(exc))
    if isinstance(result, Invalid):
        return _invalid(result)
    if isinstance(result, DuplicateEmail):
        return _failure(400, result.message)
    if isinstance(result, NotFound):
        return _failure(404, CONTACT_NOT_FOUND)
    return {
        "success": True,
        "message": "Contact updated successfully",
        "data": _contact_item(result),
    }


@router.delete("/{contact_id}")
def delete_contact(
    contact_id: str,
    service: ContactService = Depends(get_contact_service),
):
    try:
        result = service.delete_contact(contact_id)
    except StoreError as exc:
        logger.exception("Deleting contact %s failed", contact_id)
        return _failure(500, "Error deleting contact", error=str(exc))
    if isinstance(result, NotFound):
        return _failure(404, CONTACT_NOT_FOUND)
    return {
        "success": True,
        "message": "Contact deleted successfully",
        "data": _contact_item(result),
    }
