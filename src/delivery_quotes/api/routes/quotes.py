"""Delivery quote endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ...errors import QuoteServiceError
from ...schemas.quotes import (
    EstimateResponse,
    LinkOrderRequest,
    LinkParcelRequest,
    LinkResponse,
    QuoteCalculationResponse,
    QuoteModel,
    QuoteRequest,
)
from ...services.quotes.service import QuoteService
from ..deps import get_quote_service
from ..errors import to_http_exception

router = APIRouter(prefix="/quotes", tags=["quotes"])

logger = logging.getLogger(__name__)


@router.post("/calculate", response_model=QuoteCalculationResponse, status_code=status.HTTP_201_CREATED)
def calculate(payload: QuoteRequest, service: QuoteService = Depends(get_quote_service)) -> QuoteCalculationResponse:
    """Price a trip and store the quote for 30 minutes."""
    try:
        return service.calculate(payload)
    except QuoteServiceError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:
        logger.exception(f"Error calculating quote: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to calculate quote: {str(exc)}"
        ) from exc


@router.post("/estimate", response_model=EstimateResponse, status_code=status.HTTP_200_OK)
def estimate(payload: QuoteRequest, service: QuoteService = Depends(get_quote_service)) -> EstimateResponse:
    """Straight-line fee preview for the UI. Nothing is stored."""
    return service.estimate(payload)


@router.get("/by-order/{order_id}", response_model=QuoteModel | None, status_code=status.HTTP_200_OK)
def get_by_order(order_id: str, service: QuoteService = Depends(get_quote_service)) -> QuoteModel | None:
    quote = service.get_by_order(order_id)
    return QuoteModel.from_domain(quote) if quote else None


@router.get("/by-parcel/{parcel_id}", response_model=QuoteModel | None, status_code=status.HTTP_200_OK)
def get_by_parcel(parcel_id: str, service: QuoteService = Depends(get_quote_service)) -> QuoteModel | None:
    quote = service.get_by_parcel(parcel_id)
    return QuoteModel.from_domain(quote) if quote else None


@router.get("/{quote_id}", response_model=QuoteModel, status_code=status.HTTP_200_OK)
def get_quote(quote_id: str, service: QuoteService = Depends(get_quote_service)) -> QuoteModel:
    quote = service.get(quote_id)
    if quote is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Quote {quote_id} not found")
    return QuoteModel.from_domain(quote)


@router.post("/{quote_id}/link-order", response_model=LinkResponse, status_code=status.HTTP_200_OK)
def link_to_order(
    quote_id: str,
    payload: LinkOrderRequest,
    service: QuoteService = Depends(get_quote_service),
) -> LinkResponse:
    """Consume the quote for an order. A quote can be consumed once."""
    try:
        return service.link_to_order(quote_id, payload.order_id)
    except QuoteServiceError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:
        logger.exception(f"Error linking quote {quote_id} to order: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to link quote: {str(exc)}"
        ) from exc


@router.post("/{quote_id}/link-parcel", response_model=LinkResponse, status_code=status.HTTP_200_OK)
def link_to_parcel(
    quote_id: str,
    payload: LinkParcelRequest,
    service: QuoteService = Depends(get_quote_service),
) -> LinkResponse:
    """Consume the quote for a parcel. A quote can be consumed once."""
    try:
        return service.link_to_parcel(quote_id, payload.parcel_id)
    except QuoteServiceError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:
        logger.exception(f"Error linking quote {quote_id} to parcel: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to link quote: {str(exc)}"
        ) from exc
