"""Unit tests for request/response normalization in schemas."""

from datetime import UTC, datetime, timedelta, timezone
from decimal import Decimal
from types import SimpleNamespace
from uuid import uuid4

import pytest
from pydantic import ValidationError

from schemas import IOUCreate, IOUResponse, IOUUpdate

pytestmark = pytest.mark.unit


class TestCreatedAt:
    def test_offset_converted_to_utc(self):
        body = IOUCreate.model_validate({"createdAt": "2024-06-01T12:30:00-04:00"})

        assert body.created_at == datetime(2024, 6, 1, 16, 30, tzinfo=UTC)
        assert body.created_at.tzinfo is UTC

    def test_naive_taken_as_utc(self):
        body = IOUCreate.model_validate({"created_at": "2024-06-01T12:30:00"})

        assert body.created_at == datetime(2024, 6, 1, 12, 30, tzinfo=UTC)

    def test_omitted_stays_none(self):
        assert IOUCreate().created_at is None

    def test_response_reattaches_utc_to_naive_store_value(self):
        row = SimpleNamespace(
            id=uuid4(),
            borrower="Bob",
            lender="Ann",
            amount=Decimal("1.00"),
            created_at=datetime(2024, 1, 1, 5, 0),
        )

        dumped = IOUResponse.model_validate(row).model_dump(by_alias=True)

        assert dumped["createdAt"] == datetime(2024, 1, 1, 5, 0, tzinfo=UTC)

    def test_response_normalizes_other_zones(self):
        plus_two = timezone(timedelta(hours=2))
        row = SimpleNamespace(
            id=uuid4(),
            borrower="Bob",
            lender="Ann",
            amount=Decimal("1.00"),
            created_at=datetime(2024, 1, 1, 7, 0, tzinfo=plus_two),
        )

        response = IOUResponse.model_validate(row)

        assert response.created_at.utcoffset() == timedelta(0)
        assert response.created_at.hour == 5


class TestAmount:
    @pytest.mark.parametrize("model", [IOUCreate, IOUUpdate])
    def test_rounded_half_up(self, model):
        assert model(amount="0.125").amount == Decimal("0.13")

    def test_missing_amount_left_for_default(self):
        assert IOUUpdate().amount is None

    def test_unrepresentable_amount_rejected(self):
        with pytest.raises(ValidationError, match="out of range"):
            IOUCreate(amount="1e999999")
