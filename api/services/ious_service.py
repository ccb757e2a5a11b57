"""IOU business logic.

This module handles:
- Lookup with explicit not-found signalling
- Creation with store-assigned id and defaults
- Partial updates through an explicit field-by-field merge
- Borrower/lender and high/low value filters

Routes should delegate all IOU logic to this module and translate the
exceptions defined here into HTTP responses.
"""

from collections.abc import Sequence
from uuid import UUID

from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.logger import get_logger
from core.wide_event import set_wide_event_fields
from models import IOU
from repositories import IOURepository
from schemas import IOUCreate, IOUUpdate

logger = get_logger(__name__)

# Fields an update may change; id and created_at are immutable.
MERGEABLE_FIELDS = ("borrower", "lender", "amount")


class IOUServiceError(Exception):
    """Base class for IOU service failures."""

    pass


class IOUNotFoundError(IOUServiceError):
    """Raised when no IOU exists with the requested id."""

    def __init__(self, iou_id: UUID):
        self.iou_id = iou_id
        super().__init__(f"IOU {iou_id} not found")


class IOUValidationError(IOUServiceError):
    """Raised when the store rejects a write."""

    pass


def merge_iou_fields(existing: IOU, patch: IOUUpdate) -> IOU:
    """Copy borrower, lender and amount from patch onto existing.

    Values are copied as given; anything else on the patch is ignored.
    """
    for field in MERGEABLE_FIELDS:
        setattr(existing, field, getattr(patch, field))
    return existing


async def _save(repo: IOURepository, iou: IOU) -> IOU:
    try:
        return await repo.save(iou)
    except (IntegrityError, DBAPIError) as e:
        raise IOUValidationError(str(e.orig) if e.orig else str(e)) from e


async def get_all_ious(db: AsyncSession) -> Sequence[IOU]:
    return await IOURepository(db).get_all()


async def get_iou(db: AsyncSession, iou_id: UUID) -> IOU:
    """Get an IOU by id.

    Raises:
        IOUNotFoundError: If no IOU has that id.
    """
    iou = await IOURepository(db).get_by_id(iou_id)
    if iou is None:
        raise IOUNotFoundError(iou_id)
    return iou


async def create_iou(db: AsyncSession, candidate: IOUCreate) -> IOU:
    """Persist a new IOU.

    The store assigns the id. Omitted amount and created_at are left for the
    column defaults (zero and now) to fill in.

    Raises:
        IOUValidationError: If the store rejects the write.
    """
    values = candidate.model_dump(exclude_none=True)
    # borrower/lender are passed through even when missing so the store
    # decides whether the record is acceptable.
    values.setdefault("borrower", None)
    values.setdefault("lender", None)

    iou = await _save(IOURepository(db), IOU(**values))

    logger.info("iou.created", iou_id=str(iou.id), amount=str(iou.amount))
    set_wide_event_fields(iou_id=str(iou.id), iou_operation="create")
    return iou


async def update_iou(db: AsyncSession, iou_id: UUID, patch: IOUUpdate) -> IOU:
    """Apply borrower, lender and amount from patch to an existing IOU.

    Raises:
        IOUNotFoundError: If no IOU has that id.
        IOUValidationError: If the store rejects the merged record.
    """
    repo = IOURepository(db)
    existing = await repo.get_by_id(iou_id)
    if existing is None:
        raise IOUNotFoundError(iou_id)

    iou = await _save(repo, merge_iou_fields(existing, patch))

    logger.info("iou.updated", iou_id=str(iou.id), amount=str(iou.amount))
    set_wide_event_fields(iou_id=str(iou.id), iou_operation="update")
    return iou


async def delete_iou(db: AsyncSession, iou_id: UUID) -> None:
    """Delete an IOU.

    The existence check and the delete are separate statements; a concurrent
    delete in between is not detected.

    Raises:
        IOUNotFoundError: If no IOU has that id.
    """
    repo = IOURepository(db)
    if await repo.get_by_id(iou_id) is None:
        raise IOUNotFoundError(iou_id)

    await repo.delete_by_id(iou_id)

    logger.info("iou.deleted", iou_id=str(iou_id))
    set_wide_event_fields(iou_id=str(iou_id), iou_operation="delete")


async def get_ious_by_borrower(db: AsyncSession, borrower: str) -> Sequence[IOU]:
    return await IOURepository(db).get_by_borrower(borrower)


async def get_ious_by_lender(db: AsyncSession, lender: str) -> Sequence[IOU]:
    return await IOURepository(db).get_by_lender(lender)


async def get_high_value_ious(db: AsyncSession) -> Sequence[IOU]:
    """IOUs with amount strictly above the current average, newest first."""
    return await IOURepository(db).get_above_average()


async def get_low_value_ious(db: AsyncSession) -> Sequence[IOU]:
    """IOUs with amount at or below the current average, newest first."""
    return await IOURepository(db).get_at_or_below_average()
