"""Repository for IOU records."""

from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models import IOU
from repositories.utils import log_slow_query


def _average_amount():
    """Scalar subquery for the current average amount across all IOUs.

    NULL on an empty table, so comparisons against it match no rows.
    """
    return select(func.avg(IOU.amount)).scalar_subquery()


class IOURepository:
    """Repository for IOU CRUD and filter queries."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    @log_slow_query("get_all_ious")
    async def get_all(self) -> Sequence[IOU]:
        """Get all IOUs, most recent first."""
        result = await self.db.execute(select(IOU).order_by(IOU.created_at.desc()))
        return result.scalars().all()

    @log_slow_query("get_iou_by_id")
    async def get_by_id(self, iou_id: UUID) -> IOU | None:
        return await self.db.get(IOU, iou_id)

    @log_slow_query("save_iou")
    async def save(self, iou: IOU) -> IOU:
        """Insert a new IOU or flush changes to an existing one.

        The id and created_at defaults are applied at flush. Calls flush()
        but does NOT commit; the caller owns the transaction.
        """
        self.db.add(iou)
        await self.db.flush()
        await self.db.refresh(iou)
        return iou

    @log_slow_query("delete_iou")
    async def delete_by_id(self, iou_id: UUID) -> None:
        await self.db.execute(delete(IOU).where(IOU.id == iou_id))
        await self.db.flush()

    @log_slow_query("get_ious_by_borrower")
    async def get_by_borrower(self, borrower: str) -> Sequence[IOU]:
        """Case-insensitive exact match on borrower."""
        result = await self.db.execute(
            select(IOU)
            .where(func.lower(IOU.borrower) == borrower.lower())
            .order_by(IOU.created_at.desc())
        )
        return result.scalars().all()

    @log_slow_query("get_ious_by_lender")
    async def get_by_lender(self, lender: str) -> Sequence[IOU]:
        """Case-insensitive exact match on lender."""
        result = await self.db.execute(
            select(IOU)
            .where(func.lower(IOU.lender) == lender.lower())
            .order_by(IOU.created_at.desc())
        )
        return result.scalars().all()

    @log_slow_query("get_ious_above_average")
    async def get_above_average(self) -> Sequence[IOU]:
        """IOUs whose amount is strictly above the average, newest first."""
        result = await self.db.execute(
            select(IOU)
            .where(IOU.amount > _average_amount())
            .order_by(IOU.created_at.desc())
        )
        return result.scalars().all()

    @log_slow_query("get_ious_at_or_below_average")
    async def get_at_or_below_average(self) -> Sequence[IOU]:
        """IOUs whose amount is at or below the average, newest first."""
        result = await self.db.execute(
            select(IOU)
            .where(IOU.amount <= _average_amount())
            .order_by(IOU.created_at.desc())
        )
        return result.scalars().all()

