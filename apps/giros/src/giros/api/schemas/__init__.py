"""API request and response schemas."""

from giros.api.schemas.giros import (
    CompleteGiroRequest,
    CreateGiroRequest,
    GiroResponse,
)
from giros.api.schemas.ledger import (
    MinoristaBalanceResponse,
    MinoristaTransactionListResponse,
    MinoristaTransactionResponse,
)
from giros.api.schemas.rates import PublishRateRequest, RateResponse

__all__ = [
    "CompleteGiroRequest",
    "CreateGiroRequest",
    "GiroResponse",
    "MinoristaBalanceResponse",
    "MinoristaTransactionListResponse",
    "MinoristaTransactionResponse",
    "PublishRateRequest",
    "RateResponse",
]
