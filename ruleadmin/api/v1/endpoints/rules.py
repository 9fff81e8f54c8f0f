from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ruleadmin.api.deps import get_request_context, get_rule_service
from ruleadmin.core.context import RequestContext
from ruleadmin.schemas.engagement_rule import (
    RuleDeleteResponse,
    RuleOut,
    RuleUpsertRequest,
    ToggleActiveRequest,
)
from ruleadmin.services.rule_versioning import (
    RuleFields,
    RuleListFilter,
    RuleVersioningService,
)

router = APIRouter(prefix="/rules", tags=["Engagement Rules"])


def _fields(body: RuleUpsertRequest) -> RuleFields:
    return RuleFields(
        billing_type=body.billing_type.value,
        tactic_field=body.tactic_field,
        is_engagement=body.is_engagement,
        is_exposure=body.is_exposure,
    )


@router.get("", response_model=List[RuleOut])
async def list_rules(
    history: Optional[str] = Query(None),
    active: Optional[str] = Query(None),
    latest: Optional[str] = Query(None),
    ctx: RequestContext = Depends(get_request_context),
    service: RuleVersioningService = Depends(get_rule_service),
) -> List[RuleOut]:
    """List rules.

    ``history=true`` includes closed versions, ``active=true`` keeps only
    active rules, and ``latest=false`` drops the latest-only filter.
    """
    rule_filter = RuleListFilter(
        show_history=history == "true",
        only_active=active == "true",
        only_latest=latest != "false",
    )
    return await service.list_rules(ctx, rule_filter)


@router.get("/history", response_model=List[RuleOut])
async def rule_history(
    event_name: Optional[str] = Query(None, alias="eventName"),
    ctx: RequestContext = Depends(get_request_context),
    service: RuleVersioningService = Depends(get_rule_service),
) -> List[RuleOut]:
    """Every version of one rule, newest first."""
    return await service.get_history(ctx, event_name)


@router.post("", response_model=RuleOut, status_code=201)
async def create_rule(
    body: RuleUpsertRequest,
    ctx: RequestContext = Depends(get_request_context),
    service: RuleVersioningService = Depends(get_rule_service),
) -> RuleOut:
    return await service.create_rule(ctx, body.event_name, _fields(body))


@router.put("", response_model=RuleOut)
async def update_rule(
    body: RuleUpsertRequest,
    ctx: RequestContext = Depends(get_request_context),
    service: RuleVersioningService = Depends(get_rule_service),
) -> RuleOut:
    """Record a new version of an existing rule."""
    return await service.update_rule(ctx, body.event_name, _fields(body))


@router.patch("/toggle-active", response_model=RuleOut)
async def toggle_active(
    body: ToggleActiveRequest,
    ctx: RequestContext = Depends(get_request_context),
    service: RuleVersioningService = Depends(get_rule_service),
) -> RuleOut:
    return await service.toggle_active(ctx, body.event_name, body.is_active)


@router.delete("", response_model=RuleDeleteResponse)
async def delete_rule(
    event_name: Optional[str] = Query(None, alias="eventName"),
    ctx: RequestContext = Depends(get_request_context),
    service: RuleVersioningService = Depends(get_rule_service),
) -> RuleDeleteResponse:
    """Permanently remove every version of a rule."""
    deleted = await service.delete_rule(ctx, event_name)
    return RuleDeleteResponse(message="Rule deleted successfully", deleted=deleted)
