"""IOU endpoints.

Route ordering note: Literal path segments (/high, /low) are defined
before the parameterized segment (/{iou_id}) to prevent routing conflicts.
"""

from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, Response
from starlette import status

from core.database import DbSession
from core.logger import get_logger
from schemas import IOUCreate, IOUResponse, IOUUpdate
from services.ious_service import (
    IOUNotFoundError,
    IOUServiceError,
    create_iou,
    delete_iou,
    get_all_ious,
    get_high_value_ious,
    get_iou,
    get_ious_by_borrower,
    get_ious_by_lender,
    get_low_value_ious,
    update_iou,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/api/ious", tags=["ious"])

NOT_FOUND_DETAIL = "IOU Not Found"

_NOT_FOUND_RESPONSE = {404: {"description": NOT_FOUND_DETAIL}}


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_DETAIL)


def _server_error(e: Exception) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e)
    )


def _to_response(ious) -> list[IOUResponse]:
    return [IOUResponse.model_validate(iou) for iou in ious]


# --- Collection endpoints ---


@router.get("", response_model=list[IOUResponse])
async def list_ious(
    db: DbSession,
    borrower: str | None = Query(default=None),
    lender: str | None = Query(default=None),
) -> list[IOUResponse]:
    """List IOUs, optionally filtered by borrower or lender.

    A borrower filter takes precedence over a lender filter. Matching is
    case-insensitive.
    """
    if borrower and borrower.strip():
        logger.debug("ious.filter", borrower=borrower)
        ious = await get_ious_by_borrower(db, borrower)
    elif lender and lender.strip():
        logger.debug("ious.filter", lender=lender)
        ious = await get_ious_by_lender(db, lender)
    else:
        ious = await get_all_ious(db)
    return _to_response(ious)


@router.post(
    "",
    response_model=IOUResponse,
    status_code=status.HTTP_201_CREATED,
    responses={500: {"description": "IOU could not be stored"}},
)
async def create_iou_endpoint(body: IOUCreate, db: DbSession) -> IOUResponse:
    """Create an IOU. The id and (by default) createdAt are server-assigned."""
    try:
        iou = await create_iou(db, body)
    except IOUServiceError as e:
        raise _server_error(e) from e
    return IOUResponse.model_validate(iou)


# --- Literal path routes (before parameterized) ---


@router.get("/high", response_model=list[IOUResponse])
async def list_high_value_ious(db: DbSession) -> list[IOUResponse]:
    """IOUs above the average amount, newest first."""
    return _to_response(await get_high_value_ious(db))


@router.get("/low", response_model=list[IOUResponse])
async def list_low_value_ious(db: DbSession) -> list[IOUResponse]:
    """IOUs at or below the average amount, newest first."""
    return _to_response(await get_low_value_ious(db))


# --- Item endpoints ---


@router.get("/{iou_id}", response_model=IOUResponse, responses=_NOT_FOUND_RESPONSE)
async def get_iou_endpoint(iou_id: UUID, db: DbSession) -> IOUResponse:
    try:
        iou = await get_iou(db, iou_id)
    except IOUNotFoundError as e:
        raise _not_found() from e
    return IOUResponse.model_validate(iou)


@router.put("/{iou_id}", response_model=IOUResponse, responses=_NOT_FOUND_RESPONSE)
async def update_iou_endpoint(
    iou_id: UUID, body: IOUUpdate, db: DbSession
) -> IOUResponse:
    """Replace borrower, lender and amount. id and createdAt never change."""
    try:
        iou = await update_iou(db, iou_id, body)
    except IOUNotFoundError as e:
        raise _not_found() from e
    except IOUServiceError as e:
        raise _server_error(e) from e
    return IOUResponse.model_validate(iou)


@router.delete(
    "/{iou_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=_NOT_FOUND_RESPONSE,
)
async def delete_iou_endpoint(iou_id: UUID, db: DbSession) -> Response:
    try:
        await delete_iou(db, iou_id)
    except IOUNotFoundError as e:
        raise _not_found() from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)
