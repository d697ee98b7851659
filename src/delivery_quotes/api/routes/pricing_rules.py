"""Pricing rule endpoints. Mutations require a platform admin."""

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...errors import QuoteServiceError
from ...schemas.pricing_rules import (
    PricingRuleCreate,
    PricingRuleModel,
    PricingRuleUpdate,
    RemoveResponse,
    RuleIdResponse,
    ToggleStatusResponse,
)
from ...services.pricing.admin import PricingRuleService
from ..deps import get_pricing_rule_service, require_platform_admin
from ..errors import to_http_exception

router = APIRouter(prefix="/pricing-rules", tags=["pricing-rules"])

logger = logging.getLogger(__name__)


@router.get("", response_model=List[PricingRuleModel], status_code=status.HTTP_200_OK)
def list_rules(service: PricingRuleService = Depends(get_pricing_rule_service)) -> List[PricingRuleModel]:
    return service.list_rules()


@router.get("/active", response_model=List[PricingRuleModel], status_code=status.HTTP_200_OK)
def list_active(service: PricingRuleService = Depends(get_pricing_rule_service)) -> List[PricingRuleModel]:
    return service.list_active()


@router.get("/active/by-zone", response_model=List[PricingRuleModel], status_code=status.HTTP_200_OK)
def list_active_by_zone(
    zone_id: str | None = Query(default=None, description="Zone rules first, then global rules. All active rules when omitted."),
    service: PricingRuleService = Depends(get_pricing_rule_service),
) -> List[PricingRuleModel]:
    return service.list_active_by_zone(zone_id)


@router.get("/by-zone/{zone_id}", response_model=List[PricingRuleModel], status_code=status.HTTP_200_OK)
def list_by_zone(zone_id: str, service: PricingRuleService = Depends(get_pricing_rule_service)) -> List[PricingRuleModel]:
    return service.list_by_zone(zone_id)


@router.get("/{rule_id}", response_model=PricingRuleModel, status_code=status.HTTP_200_OK)
def get_rule(rule_id: str, service: PricingRuleService = Depends(get_pricing_rule_service)) -> PricingRuleModel:
    rule = service.get(rule_id)
    if rule is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Pricing rule {rule_id} not found")
    return rule


@router.post(
    "",
    response_model=RuleIdResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_platform_admin)],
)
def create_rule(
    payload: PricingRuleCreate,
    service: PricingRuleService = Depends(get_pricing_rule_service),
) -> RuleIdResponse:
    try:
        return RuleIdResponse(id=service.create(payload))
    except QuoteServiceError as exc:
        raise to_http_exception(exc) from exc


@router.patch(
    "/{rule_id}",
    response_model=RuleIdResponse,
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_platform_admin)],
)
def update_rule(
    rule_id: str,
    payload: PricingRuleUpdate,
    service: PricingRuleService = Depends(get_pricing_rule_service),
) -> RuleIdResponse:
    try:
        return RuleIdResponse(id=service.update(rule_id, payload))
    except QuoteServiceError as exc:
        raise to_http_exception(exc) from exc


@router.delete(
    "/{rule_id}",
    response_model=RemoveResponse,
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_platform_admin)],
)
def remove_rule(rule_id: str, service: PricingRuleService = Depends(get_pricing_rule_service)) -> RemoveResponse:
    try:
        service.remove(rule_id)
    except QuoteServiceError as exc:
        raise to_http_exception(exc) from exc
    return RemoveResponse(success=True)


@router.post(
    "/{rule_id}/toggle-status",
    response_model=ToggleStatusResponse,
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_platform_admin)],
)
def toggle_status(rule_id: str, service: PricingRuleService = Depends(get_pricing_rule_service)) -> ToggleStatusResponse:
    try:
        return ToggleStatusResponse(status=service.toggle_status(rule_id))
    except QuoteServiceError as exc:
        raise to_http_exception(exc) from exc
