"""Prompt settings service — the default system prompt and buyer prompt resets.

The default prompt lives in the ``app_settings`` row keyed
``default_system_prompt`` as ``{"template": ..., "version": N}``. Every
successful update bumps the version by exactly one, including updates that
store the same template again.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..exceptions import PersistenceError, TemplateValidationError
from ..models.buyer import Buyer
from ..models.setting import Setting, dump_payload
from .prompt_template import DEFAULT_SYSTEM_PROMPT, PLACEHOLDER_DOCS, validate_template

logger = logging.getLogger(__name__)

DEFAULT_PROMPT_KEY = "default_system_prompt"
PLACEHOLDERS_KEY = "system_prompt_placeholders"

# Compare-and-swap attempts before a contended version bump gives up
MAX_VERSION_ATTEMPTS = 5


@dataclass
class DefaultPrompt:
    template: str
    version: int
    placeholders: dict[str, Any]
    updated_at: Optional[datetime]
    is_default: bool


def _load(raw: str | None) -> dict[str, Any]:
    """Decode a stored setting; unreadable or non-object values count as absent."""
    if not raw:
        return {}
    try:
        payload = json.loads(raw)
    except ValueError:
        logger.warning("Ignoring undecodable setting value %r", raw[:80])
        return {}
    return payload if isinstance(payload, dict) else {}


def _stored_version(payload: dict[str, Any]) -> int:
    """Version held by a prompt payload; missing or null reads as 0."""
    try:
        return int(payload.get("version") or 0)
    except (TypeError, ValueError):
        return 0


def _stored_template(payload: dict[str, Any]) -> Optional[str]:
    template = payload.get("template")
    return template if isinstance(template, str) and template else None


def get_default_prompt(db: Session) -> DefaultPrompt:
    """Read the default prompt, falling back to the built-in template."""
    prompt_row = db.execute(
        select(Setting.value, Setting.updated_at).where(Setting.key == DEFAULT_PROMPT_KEY)
    ).first()
    placeholder_raw = db.execute(
        select(Setting.value).where(Setting.key == PLACEHOLDERS_KEY)
    ).scalar_one_or_none()

    prompt = _load(prompt_row.value) if prompt_row else {}
    placeholders = _load(placeholder_raw) or PLACEHOLDER_DOCS
    template = _stored_template(prompt)

    return DefaultPrompt(
        template=template or DEFAULT_SYSTEM_PROMPT,
        version=max(_stored_version(prompt), 1),
        placeholders=placeholders,
        updated_at=prompt_row.updated_at if prompt_row else None,
        is_default=template is None,
    )


def update_default_prompt(db: Session, template: str) -> int:
    """Store *template* as the default prompt and return its new version.

    The version bump is a compare-and-swap on the stored value: the UPDATE only
    applies if the row still holds what was read. When another writer got in
    first the value is re-read and the bump recomputed, so concurrent writers
    end up with distinct consecutive versions.
    """
    validation = validate_template(template)
    if not validation.is_valid:
        raise TemplateValidationError(validation.missing_buyer, validation.missing_listing)

    for attempt in range(1, MAX_VERSION_ATTEMPTS + 1):
        current = db.execute(
            select(Setting.value).where(Setting.key == DEFAULT_PROMPT_KEY)
        ).scalar_one_or_none()
        new_version = _stored_version(_load(current)) + 1
        new_value = dump_payload({"template": template, "version": new_version})
        now = datetime.now(timezone.utc)

        if current is None:
            db.add(Setting(key=DEFAULT_PROMPT_KEY, value=new_value, updated_at=now))
            try:
                db.commit()
            except IntegrityError:
                # Another writer inserted the first version
                db.rollback()
            else:
                logger.info("Default prompt created at version %d", new_version)
                return new_version
        else:
            result = db.execute(
                update(Setting)
                .where(Setting.key == DEFAULT_PROMPT_KEY, Setting.value == current)
                .values(value=new_value, updated_at=now)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 1:
                db.commit()
                logger.info("Default prompt updated to version %d", new_version)
                return new_version
            db.rollback()

        logger.warning(
            "Default prompt changed concurrently (attempt %d/%d), re-reading",
            attempt, MAX_VERSION_ATTEMPTS,
        )

    raise PersistenceError(
        f"Default prompt update lost {MAX_VERSION_ATTEMPTS} consecutive races"
    )


def reset_buyer_prompts(db: Session) -> int:
    """Clear every buyer-specific prompt; return how many buyers were reset.

    A single UPDATE, so the reported count is exactly the rows it changed.
    """
    result = db.execute(
        update(Buyer)
        .where(Buyer.system_prompt.is_not(None))
        .values(system_prompt=None, updated_at=datetime.now(timezone.utc))
        .execution_options(synchronize_session=False)
    )
    db.commit()
    count = result.rowcount or 0
    logger.info("Reset %d buyer prompt(s) to the default", count)
    return count


def resolve_prompt_for_buyer(db: Session, buyer: Buyer) -> str:
    """Return the template a buyer is qualified with: override, else default."""
    if buyer.system_prompt:
        return buyer.system_prompt
    stored = db.execute(
        select(Setting.value).where(Setting.key == DEFAULT_PROMPT_KEY)
    ).scalar_one_or_none()
    return _stored_template(_load(stored)) or DEFAULT_SYSTEM_PROMPT
