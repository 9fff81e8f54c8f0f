"""Engagement-rule Pydantic schemas (create/update, toggle, response)."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from ruleadmin.core.constants import EVENT_NAME_MAX_LENGTH, TACTIC_FIELD_MAX_LENGTH
from ruleadmin.schemas.common import BillingType, CamelModel, MessageResponse


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class RuleUpsertRequest(CamelModel):
    """Request body for POST /rules and PUT /rules.

    PUT replaces every business field of the rule; omitted optional fields
    are cleared on the new version rather than carried forward.
    """

    event_name: str = Field(..., min_length=1, max_length=EVENT_NAME_MAX_LENGTH)
    billing_type: BillingType
    tactic_field: Optional[str] = Field(None, max_length=TACTIC_FIELD_MAX_LENGTH)
    is_engagement: int = Field(..., ge=0, le=1, strict=True)
    is_exposure: int = Field(..., ge=0, le=1, strict=True)


class ToggleActiveRequest(CamelModel):
    """Request body for PATCH /rules/toggle-active."""

    event_name: str = Field(..., min_length=1, max_length=EVENT_NAME_MAX_LENGTH)
    is_active: int = Field(..., ge=0, le=1, strict=True)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class RuleOut(CamelModel):
    """One version record of an engagement rule."""

    id: UUID
    event_name: str
    billing_type: str
    tactic_field: Optional[str] = None
    is_engagement: int
    is_exposure: int
    is_active: int
    is_latest: int
    version: int
    valid_from: datetime
    valid_to: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    modified_by: str
    inactivated_at: Optional[datetime] = None
    inactivated_by: Optional[str] = None


class RuleDeleteResponse(MessageResponse):
    """Response body for DELETE /rules."""

    deleted: int = Field(..., ge=0)
