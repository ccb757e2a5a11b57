"""Pydantic schemas for API request/response validation."""

from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

_CREATED_AT_ALIASES = AliasChoices("createdAt", "created_at")
_CENTS = Decimal("0.01")


def as_utc(value: datetime | None) -> datetime | None:
    """Normalize a timestamp to UTC; naive values are taken to be UTC already."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def round_amount(value: Decimal | None) -> Decimal | None:
    """Round to whole cents (half up) so every backend stores the same value."""
    if value is None:
        return None
    try:
        return value.quantize(_CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        raise ValueError("amount is out of range") from e


class IOUCreate(BaseModel):
    """Request body for creating an IOU.

    Any client-supplied ``id`` is ignored. Omitted ``amount`` and
    ``createdAt`` fall back to the store defaults (zero and now).
    """

    borrower: str | None = None
    lender: str | None = None
    amount: Decimal | None = None
    created_at: datetime | None = Field(
        default=None, validation_alias=_CREATED_AT_ALIASES
    )

    @field_validator("amount")
    @classmethod
    def round_to_cents(cls, value: Decimal | None) -> Decimal | None:
        return round_amount(value)

    @field_validator("created_at")
    @classmethod
    def normalize_created_at(cls, value: datetime | None) -> datetime | None:
        return as_utc(value)


class IOUUpdate(BaseModel):
    """Only borrower, lender and amount are applied; ``id`` and ``createdAt`` are ignored."""

    borrower: str | None = None
    lender: str | None = None
    amount: Decimal | None = None

    @field_validator("amount")
    @classmethod
    def round_to_cents(cls, value: Decimal | None) -> Decimal | None:
        return round_amount(value)


class IOUResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    borrower: str
    lender: str
    amount: Decimal
    # SQLite hands timestamps back without a zone
    created_at: datetime = Field(
        validation_alias=_CREATED_AT_ALIASES, serialization_alias="createdAt"
    )

    @field_validator("created_at")
    @classmethod
    def normalize_created_at(cls, value: datetime) -> datetime:
        return as_utc(value)


class HealthResponse(BaseModel):
    status: str
    service: str
