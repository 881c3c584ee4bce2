"""CRUD endpoints for actions."""

import math
import re
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Request, Response

from action_tracker.database import ActionStore
from action_tracker.models import (
    ActionCreate,
    ActionFilter,
    ActionListResponse,
    ActionPatch,
    ActionResponse,
)

router = APIRouter(tags=["actions"])

NOT_FOUND = "action not found"


def get_store(request: Request) -> ActionStore:
    """Return the store attached to the application at startup."""
    return request.app.state.store


# Decimal literals only: no underscores, hex or words like "nan".
_NUMBER = re.compile(r"\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?\s*")

# Range of SQLite INTEGER PRIMARY KEY values.
_MIN_ID = -(2**63)
_MAX_ID = 2**63 - 1


def _parse_id(raw: str) -> Optional[int]:
    """Parse a path id.

    Raises 400 unless ``raw`` is a finite decimal number. Returns None for a
    number that cannot identify any action: non-integral or outside the
    64-bit id range.
    """
    if not _NUMBER.fullmatch(raw):
        raise HTTPException(status_code=400, detail="invalid id")
    value = float(raw)
    if not math.isfinite(value):
        raise HTTPException(status_code=400, detail="invalid id")
    if not value.is_integer():
        return None
    parsed = int(value)
    return parsed if _MIN_ID <= parsed <= _MAX_ID else None


def _require_object(payload: Any) -> dict:
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="invalid payload")
    return payload


@router.get("/health")
def health_check():
    """Health check endpoint."""
    return {"ok": True}


@router.get("/actions", response_model=ActionListResponse)
def list_actions(
    status: Optional[str] = None,
    origin: Optional[str] = None,
    q: Optional[str] = None,
    store: ActionStore = Depends(get_store),
):
    """List actions, optionally filtered by status, origin and a search text."""
    filters = ActionFilter(status=status, origin=origin, search=q)
    return {"actions": store.list(filters)}


@router.post("/actions", status_code=201, response_model=ActionResponse)
def create_action(
    payload: Any = Body(default=None),
    store: ActionStore = Depends(get_store),
):
    """Create a new action. Title and origin are required."""
    fields = ActionCreate.model_validate(_require_object(payload))
    if not fields.title:
        raise HTTPException(status_code=400, detail="title required")
    if not fields.origin:
        raise HTTPException(status_code=400, detail="origin required")
    return {"action": store.create(fields)}


@router.patch("/actions/{action_id}", response_model=ActionResponse)
def update_action(
    action_id: str,
    payload: Any = Body(default=None),
    store: ActionStore = Depends(get_store),
):
    """Update an existing action. Only string-valued known fields are applied."""
    parsed_id = _parse_id(action_id)
    patch = ActionPatch.model_validate(_require_object(payload))
    changes = patch.changes()
    if "title" in changes and not changes["title"]:
        raise HTTPException(status_code=400, detail="title required")
    if "origin" in changes and not changes["origin"]:
        raise HTTPException(status_code=400, detail="origin required")
    action = store.update(parsed_id, patch) if parsed_id is not None else None
    if action is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return {"action": action}


@router.delete("/actions/{action_id}", status_code=204)
def delete_action(action_id: str, store: ActionStore = Depends(get_store)) -> Response:
    """Delete an action by ID."""
    parsed_id = _parse_id(action_id)
    if parsed_id is None or not store.delete(parsed_id):
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return Response(status_code=204)
