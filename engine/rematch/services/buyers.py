"""Buyer service — CRUD for buyer profiles and their prompt overrides."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.orm import Session

from ..exceptions import NotFoundError, TemplateValidationError, ValidationError
from ..models.buyer import Buyer
from .prompt_template import validate_template

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = frozenset({"name", "slack_channel"})


def _clean_channel(slack_channel: str | None) -> str | None:
    """An empty channel is stored as NULL; anything else is kept as typed."""
    return slack_channel or None


def list_buyers(db: Session) -> list[Buyer]:
    return db.query(Buyer).order_by(Buyer.created_at.desc()).all()


def get_buyer(db: Session, buyer_id: str) -> Buyer:
    buyer = db.get(Buyer, buyer_id)
    if buyer is None:
        raise NotFoundError("Buyer not found")
    return buyer


def insert_buyer(db: Session, name: str, slack_channel: str | None = None) -> Buyer:
    """Insert a buyer exactly as typed and return the stored row (with its generated id)."""
    buyer = Buyer(name=name, slack_channel=_clean_channel(slack_channel))
    db.add(buyer)
    db.commit()
    db.refresh(buyer)
    logger.info("Created buyer %s (%s)", buyer.id, buyer.name)
    return buyer


def create_buyer(db: Session, name: str, slack_channel: str | None = None) -> Buyer:
    """Insert a buyer, rejecting a blank name."""
    if not name or not name.strip():
        raise ValidationError("Buyer name is required")
    return insert_buyer(db, name, slack_channel)


def update_buyer(db: Session, buyer_id: str, **kwargs: Any) -> Buyer:
    buyer = get_buyer(db, buyer_id)
    for key, value in kwargs.items():
        if key not in _UPDATABLE_FIELDS:
            continue
        if key == "name" and (not value or not value.strip()):
            raise ValidationError("Buyer name is required")
        if key == "slack_channel":
            value = _clean_channel(value)
        setattr(buyer, key, value)
    db.commit()
    db.refresh(buyer)
    return buyer


def delete_buyer(db: Session, buyer_id: str) -> None:
    buyer = get_buyer(db, buyer_id)
    db.delete(buyer)
    db.commit()
    logger.info("Deleted buyer %s", buyer_id)


def set_buyer_prompt(db: Session, buyer_id: str, template: str) -> Buyer:
    """Give a buyer its own prompt template; it must pass the same checks as the default."""
    validation = validate_template(template)
    if not validation.is_valid:
        raise TemplateValidationError(validation.missing_buyer, validation.missing_listing)
    buyer = get_buyer(db, buyer_id)
    buyer.system_prompt = template
    db.commit()
    db.refresh(buyer)
    return buyer


def clear_buyer_prompt(db: Session, buyer_id: str) -> Buyer:
    """Revert a buyer to the default prompt."""
    buyer = get_buyer(db, buyer_id)
    buyer.system_prompt = None
    db.commit()
    db.refresh(buyer)
    return buyer
