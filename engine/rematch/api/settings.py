"""Settings API — the default system prompt and resetting buyer overrides.

GET  /settings/prompt            read the default prompt and placeholder docs
PUT  /settings/prompt            store a new default prompt (version + 1)
POST /settings/prompt/apply-all  clear every buyer-specific prompt
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..db import get_db
from ..exceptions import PersistenceError
from ..services.failure_log import report_failure
from ..services.prompt_settings import (
    get_default_prompt,
    reset_buyer_prompts,
    update_default_prompt,
)
from .errors import error_response
from .schemas import ApplyAllOut, DefaultPromptOut, PromptUpdateOut

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("/prompt", response_model=DefaultPromptOut)
def read_default_prompt(db: Session = Depends(get_db)):
    try:
        prompt = get_default_prompt(db)
    except SQLAlchemyError as e:
        report_failure("settings.prompt.read", e)
        return error_response(500, "Failed to fetch default prompt")
    return DefaultPromptOut(
        template=prompt.template,
        version=prompt.version,
        placeholders=prompt.placeholders,
        updated_at=prompt.updated_at,
        is_default=prompt.is_default,
    )


@router.put("/prompt", response_model=PromptUpdateOut)
def write_default_prompt(body: Any = Body(None), db: Session = Depends(get_db)):
    template = body.get("template") if isinstance(body, dict) else None
    if not template or not isinstance(template, str):
        return error_response(400, "Template is required and must be a string")

    try:
        version = update_default_prompt(db, template)
    except (SQLAlchemyError, PersistenceError) as e:
        report_failure("settings.prompt.write", e)
        return error_response(500, "Failed to update default prompt")
    return PromptUpdateOut(version=version)


@router.post("/prompt/apply-all", response_model=ApplyAllOut)
def apply_default_prompt_to_all(db: Session = Depends(get_db)):
    """Reset every buyer to the default prompt by clearing their overrides."""
    try:
        count = reset_buyer_prompts(db)
    except SQLAlchemyError as e:
        report_failure("settings.prompt.apply_all", e)
        return error_response(500, "Failed to apply default prompt to all buyers")
    return ApplyAllOut(
        message=f"Reset {count} buyer(s) to use the default prompt",
        reset_count=count,
    )
