"""Buyer management API endpoints, including per-buyer prompt overrides."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..db import get_db
from ..services import buyers as buyer_service
from ..services.failure_log import report_failure
from ..services.prompt_settings import resolve_prompt_for_buyer
from .errors import error_response
from .schemas import (
    BuyerCreate,
    BuyerOut,
    BuyerPromptChangeOut,
    BuyerPromptOut,
    BuyerUpdate,
)

router = APIRouter(prefix="/buyers", tags=["buyers"])


@router.get("", response_model=list[BuyerOut])
def list_buyers(db: Session = Depends(get_db)):
    try:
        return buyer_service.list_buyers(db)
    except SQLAlchemyError as e:
        report_failure("buyers.list", e)
        return error_response(500, "Failed to fetch buyers")


@router.get("/{buyer_id}", response_model=BuyerOut)
def get_buyer(buyer_id: str, db: Session = Depends(get_db)):
    try:
        return buyer_service.get_buyer(db, buyer_id)
    except SQLAlchemyError as e:
        report_failure("buyers.get", e, buyer_id=buyer_id)
        return error_response(500, "Failed to fetch buyer")


@router.post("", response_model=BuyerOut, status_code=201)
def create_buyer(body: BuyerCreate, db: Session = Depends(get_db)):
    try:
        return buyer_service.create_buyer(db, body.name, body.slack_channel)
    except SQLAlchemyError as e:
        report_failure("buyers.create", e)
        return error_response(500, "Failed to create buyer")


@router.put("/{buyer_id}", response_model=BuyerOut)
def update_buyer(buyer_id: str, body: BuyerUpdate, db: Session = Depends(get_db)):
    updates = body.model_dump(exclude_unset=True)
    if not updates:
        return error_response(400, "No fields to update")
    try:
        return buyer_service.update_buyer(db, buyer_id, **updates)
    except SQLAlchemyError as e:
        report_failure("buyers.update", e, buyer_id=buyer_id)
        return error_response(500, "Failed to update buyer")


@router.delete("/{buyer_id}", status_code=204)
def delete_buyer(buyer_id: str, db: Session = Depends(get_db)):
    try:
        buyer_service.delete_buyer(db, buyer_id)
    except SQLAlchemyError as e:
        report_failure("buyers.delete", e, buyer_id=buyer_id)
        return error_response(500, "Failed to delete buyer")


# ---------------------------------------------------------------------------
# Buyer-specific system prompt
# ---------------------------------------------------------------------------


@router.get("/{buyer_id}/prompt", response_model=BuyerPromptOut)
def get_buyer_prompt(buyer_id: str, db: Session = Depends(get_db)):
    """Return the buyer's own prompt, or the default prompt they fall back to."""
    try:
        buyer = buyer_service.get_buyer(db, buyer_id)
        template = resolve_prompt_for_buyer(db, buyer)
    except SQLAlchemyError as e:
        report_failure("buyers.prompt.read", e, buyer_id=buyer_id)
        return error_response(500, "Failed to fetch buyer prompt")

    is_custom = bool(buyer.system_prompt)
    return BuyerPromptOut(
        buyer_id=buyer.id,
        buyer_name=buyer.name,
        template=template,
        is_custom=is_custom,
        message=(
            "Buyer has a custom system prompt" if is_custom
            else "Buyer uses the default system prompt"
        ),
    )


@router.put("/{buyer_id}/prompt", response_model=BuyerPromptChangeOut)
def update_buyer_prompt(buyer_id: str, body: Any = Body(None), db: Session = Depends(get_db)):
    template = body.get("template") if isinstance(body, dict) else None
    if not template or not isinstance(template, str):
        return error_response(400, "Template is required and must be a string")

    try:
        buyer = buyer_service.set_buyer_prompt(db, buyer_id, template)
    except SQLAlchemyError as e:
        report_failure("buyers.prompt.write", e, buyer_id=buyer_id)
        return error_response(500, "Failed to update buyer prompt")
    return BuyerPromptChangeOut(
        buyer_id=buyer.id,
        buyer_name=buyer.name,
        message="Buyer prompt updated successfully",
    )


@router.delete("/{buyer_id}/prompt", response_model=BuyerPromptChangeOut)
def reset_buyer_prompt(buyer_id: str, db: Session = Depends(get_db)):
    """Reset a single buyer to the default prompt."""
    try:
        buyer = buyer_service.clear_buyer_prompt(db, buyer_id)
    except SQLAlchemyError as e:
        report_failure("buyers.prompt.reset", e, buyer_id=buyer_id)
        return error_response(500, "Failed to reset buyer prompt")
    return BuyerPromptChangeOut(
        buyer_id=buyer.id,
        buyer_name=buyer.name,
        message="Buyer reset to use default prompt",
    )
