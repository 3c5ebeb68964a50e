"""Rate book routes."""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status

from giros.api.dependencies import get_rate_book_service
from giros.api.schemas.rates import PublishRateRequest, RateResponse
from giros.services.rate_book_service import RateBookService, RateValues

router = APIRouter(prefix="/rates", tags=["Rates"])


@router.post(
    "",
    response_model=RateResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Invalid rate values"}},
)
def publish_rate(
    payload: PublishRateRequest,
    service: Annotated[RateBookService, Depends(get_rate_book_service)],
) -> RateResponse:
    """Publish a new current rate."""

    rate = service.publish_rate(
        RateValues(
            buy_rate=Decimal(payload.buy_rate),
            sell_rate=Decimal(payload.sell_rate),
            usd=Decimal(payload.usd),
            bcv=Decimal(payload.bcv),
        ),
        created_by=payload.created_by,
    )
    return RateResponse.from_model(rate)


@router.get(
    "/current",
    response_model=RateResponse,
    responses={404: {"description": "No rate published yet"}},
)
def get_current_rate(
    service: Annotated[RateBookService, Depends(get_rate_book_service)],
) -> RateResponse:
    """Return the latest non-custom rate."""

    return RateResponse.from_model(service.get_current_rate())


@router.get(
    "/{rate_id}",
    response_model=RateResponse,
    responses={404: {"description": "Rate not found"}},
)
def get_rate(
    rate_id: UUID,
    service: Annotated[RateBookService, Depends(get_rate_book_service)],
) -> RateResponse:
    """Return one snapshot, e.g. the rate a giro was priced against."""

    return RateResponse.from_model(service.get_rate(rate_id))
