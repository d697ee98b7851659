"""FastAPI dependencies: service wiring and the platform-admin gate."""

from __future__ import annotations

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from ..config import settings
from ..errors import ForbiddenError
from ..persistence.pricing_rules import get_pricing_rule_store, get_zone_store
from ..persistence.quotes import get_quote_store
from ..services.pricing.admin import PricingRuleService
from ..services.pricing.resolver import build_config_resolver
from ..services.quotes.service import QuoteService
from ..services.routing.distance import build_distance_estimator
from .errors import to_http_exception

# Tokens come from the external identity provider; this service only verifies them.
bearer_scheme = HTTPBearer(auto_error=False)

ADMIN_ROLE = "admin"


def get_quote_service() -> QuoteService:
    return QuoteService(
        store=get_quote_store(),
        estimator=build_distance_estimator(),
        resolver=build_config_resolver(),
    )


def get_pricing_rule_service() -> PricingRuleService:
    return PricingRuleService(rules=get_pricing_rule_store(), zones=get_zone_store())


def decode_token(token: str) -> dict:
    """Verify the JWT signature and expiry and return its claims."""
    return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])


def is_platform_admin(claims: dict) -> bool:
    return claims.get("platform_role") == ADMIN_ROLE


def require_platform_admin(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> dict:
    """Reject the request unless the bearer token belongs to a platform admin."""
    if not settings.jwt_secret:
        raise to_http_exception(ForbiddenError("Forbidden: admin authentication is not configured"))
    if credentials is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    try:
        claims = decode_token(credentials.credentials)
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")
    if not is_platform_admin(claims):
        raise to_http_exception(ForbiddenError("Forbidden: Platform admin access required"))
    return claims
