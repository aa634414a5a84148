"""Error envelope helpers and the failure log API."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..exceptions import RematchError, TemplateValidationError
from ..services.failure_log import failure_log

router = APIRouter(prefix="/errors", tags=["errors"])


def error_response(status_code: int, error: str, **extra: Any) -> JSONResponse:
    """Build the ``{"error": ...}`` body every failing endpoint returns."""
    return JSONResponse(status_code=status_code, content={"error": error, **extra})


def template_error_body(exc: TemplateValidationError) -> dict[str, Any]:
    return {"missingBuyer": exc.missing_buyer, "missingListing": exc.missing_listing}


async def rematch_error_handler(request: Request, exc: RematchError) -> JSONResponse:
    if isinstance(exc, TemplateValidationError):
        return error_response(exc.status_code, exc.message, **template_error_body(exc))
    return error_response(exc.status_code, exc.message)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = [".".join(str(p) for p in err.get("loc", ())) for err in exc.errors()]
    return error_response(400, "Invalid request body", fields=fields)


@router.get("")
def list_errors(source: str | None = None, buyer_id: str | None = None, limit: int = 50):
    """Recent failures, newest first, with running counts per source."""
    records = failure_log.recent(source=source, buyer_id=buyer_id, limit=limit)
    return {
        "errors": [r.to_dict() for r in records],
        "total": len(failure_log),
        "bySource": failure_log.counts(),
    }


@router.delete("", status_code=204)
def clear_errors():
    """Clear the failure log and its counts."""
    failure_log.clear()
