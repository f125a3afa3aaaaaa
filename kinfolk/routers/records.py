"""Routes for adding, deleting and sharing individual records."""
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Response, status
from pydantic import ValidationError

from kinfolk.core.logger import get_logger
from kinfolk.models import Account, RecordType
from kinfolk.schemas import (
    RECORD_PAYLOADS,
    AnyRecordView,
    ItemSharesResult,
    ItemSharesUpdate,
    RecordView,
)
from kinfolk.services import RecordsService, SharingService

from .dependencies import get_current_account, get_records_service, get_sharing_service

router = APIRouter(tags=["records"])
LOGGER = get_logger(__name__)


@router.post(
    "/people/{person_id}/records/{record_type}",
    response_model=AnyRecordView,
    status_code=status.HTTP_201_CREATED,
)
def add_record(
    person_id: int,
    record_type: RecordType,
    payload: dict[str, Any] = Body(...),
    account: Account = Depends(get_current_account),
    records: RecordsService = Depends(get_records_service),
) -> RecordView:
    """Add a record; ``share_with`` overrides the person's default sharing."""

    try:
        parsed = RECORD_PAYLOADS[record_type].model_validate(payload)
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=exc.errors(include_url=False, include_context=False),
        ) from exc
    return records.add_record(
        person_id,
        record_type,
        parsed.record_fields(),
        account.id,
        share_with=parsed.share_with,
    )


@router.delete(
    "/records/{record_type}/{record_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_record(
    record_type: RecordType,
    record_id: int,
    account: Account = Depends(get_current_account),
    records: RecordsService = Depends(get_records_service),
) -> Response:
    records.delete_record(record_type, record_id, account.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/records/{record_type}/{record_id}/shares", response_model=ItemSharesResult)
def set_item_shares(
    record_type: RecordType,
    record_id: int,
    payload: ItemSharesUpdate,
    account: Account = Depends(get_current_account),
    sharing: SharingService = Depends(get_sharing_service),
) -> ItemSharesResult:
    return sharing.set_item_shares(record_type, record_id, payload.person_share_ids, account.id)
