from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from uuid import UUID, uuid4

import pytest

from giros.db.models.exchange_rate import ExchangeRate
from giros.domain.errors import (
    NotFoundError,
    PreconditionFailedError,
    ValidationFailedError,
)
from giros.services.rate_book_service import RateBookService, RateValues


class FakeSession:
    def __init__(self) -> None:
        self.committed = False
        self.rolled_back = False

    def commit(self) -> None:
        self.committed = True

    def rollback(self) -> None:
        self.rolled_back = True


@dataclass
class FakeExchangeRateRepository:
    rates: list[ExchangeRate] = field(default_factory=list)

    def get(self, rate_id: UUID) -> ExchangeRate | None:
        for rate in self.rates:
            if rate.id == rate_id:
                return rate
        return None

    def get_current(self) -> ExchangeRate | None:
        published = [rate for rate in self.rates if not rate.is_custom]
        return published[-1] if published else None

    def add(self, rate: ExchangeRate) -> ExchangeRate:
        rate.id = uuid4()
        self.rates.append(rate)
        return rate


def _values(**overrides: str) -> RateValues:
    values = {"buy_rate": "38", "sell_rate": "40", "usd": "36.5", "bcv": "36.5"}
    values.update(overrides)
    return RateValues(**{name: Decimal(value) for name, value in values.items()})


def _service(
    repository: FakeExchangeRateRepository,
    session: FakeSession | None = None,
) -> RateBookService:
    return RateBookService(
        exchange_rate_repository=repository,
        session=session or FakeSession(),
    )


def test_publish_rate_quantizes_to_four_places_and_commits() -> None:
    repository = FakeExchangeRateRepository()
    session = FakeSession()

    rate = _service(repository, session).publish_rate(
        _values(sell_rate="40.123456"), created_by="admin"
    )

    assert session.committed is True
    assert rate.sell_rate == Decimal("40.1235")
    assert rate.is_custom is False
    assert _service(repository).get_current_rate() is rate


def test_publish_rate_rejects_non_positive_values() -> None:
    repository = FakeExchangeRateRepository()
    session = FakeSession()

    with pytest.raises(ValidationFailedError) as error:
        _service(repository, session).publish_rate(
            _values(buy_rate="0", bcv="-1"), created_by="admin"
        )

    assert error.value.details == {"fields": ["buy_rate", "bcv"]}
    assert session.rolled_back is True
    assert repository.rates == []


def test_get_current_rate_without_publication_is_not_found() -> None:
    with pytest.raises(NotFoundError):
        _service(FakeExchangeRateRepository()).get_current_rate()


def test_resolve_snapshot_uses_current_rate() -> None:
    repository = FakeExchangeRateRepository()
    service = _service(repository)
    published = service.publish_rate(_values(), created_by="admin")

    assert service.resolve_snapshot(custom=None, created_by="op-1") is published


def test_resolve_snapshot_requires_published_rate() -> None:
    with pytest.raises(PreconditionFailedError):
        _service(FakeExchangeRateRepository()).resolve_snapshot(
            custom=None, created_by="op-1"
        )


def test_custom_snapshot_does_not_replace_current_rate() -> None:
    repository = FakeExchangeRateRepository()
    service = _service(repository)
    published = service.publish_rate(_values(), created_by="admin")

    custom = service.resolve_snapshot(
        custom=_values(sell_rate="42"), created_by="op-1"
    )

    assert custom.is_custom is True
    assert custom.sell_rate == Decimal("42.0000")
    assert custom.created_by == "op-1"
    assert service.get_current_rate() is published
    assert service.get_rate(custom.id) is custom
