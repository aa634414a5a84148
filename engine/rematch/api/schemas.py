"""Pydantic schemas for API request/response — decoupled from SQLAlchemy models."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Default prompt schemas
# ---------------------------------------------------------------------------


class DefaultPromptOut(BaseModel):
    template: str
    version: int
    placeholders: dict[str, Any]
    updated_at: Optional[datetime] = Field(None, serialization_alias="updatedAt")
    is_default: bool = Field(..., serialization_alias="isDefault")


class PromptUpdateOut(BaseModel):
    success: bool = True
    version: int
    message: str = "Default prompt updated successfully"


class ApplyAllOut(BaseModel):
    success: bool = True
    message: str
    reset_count: int = Field(..., serialization_alias="resetCount")


# ---------------------------------------------------------------------------
# Buyer schemas
# ---------------------------------------------------------------------------


class BuyerCreate(BaseModel):
    name: str = Field(..., min_length=1, description="Buyer display name")
    slack_channel: Optional[str] = Field(None, description="e.g. '#buyer-alerts' or '@username'")


class BuyerUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    slack_channel: Optional[str] = None


class BuyerOut(BaseModel):
    id: str
    name: str
    slack_channel: Optional[str]
    system_prompt: Optional[str]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class BuyerPromptOut(BaseModel):
    buyer_id: str = Field(..., serialization_alias="buyerId")
    buyer_name: str = Field(..., serialization_alias="buyerName")
    template: str
    is_custom: bool = Field(..., serialization_alias="isCustom")
    message: str


class BuyerPromptChangeOut(BaseModel):
    success: bool = True
    buyer_id: str = Field(..., serialization_alias="buyerId")
    buyer_name: str = Field(..., serialization_alias="buyerName")
    message: str
