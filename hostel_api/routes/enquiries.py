"""
User enquiry routes.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import logging

from hostel_api.database import get_db
from hostel_api.schemas import EnquiryCreate, EnquiryResponse, EnquiryUpdate
from hostel_api.services import branch_service, enquiry_service
from hostel_api.utils.responses import api_error, parse_id, success_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/enquiries")


async def _check_branch_reference(db: AsyncSession, branch_id: Optional[int]) -> None:
    if branch_id is not None and not await branch_service.get_branch(db, branch_id):
        raise api_error(status.HTTP_400_BAD_REQUEST, "Branch not found", details=f"Branch ID {branch_id} does not exist")


async def _get_enquiry_or_404(db: AsyncSession, raw_id: str):
    enquiry = await enquiry_service.get_enquiry(db, parse_id(raw_id, "enquiry"))
    if not enquiry:
        raise api_error(status.HTTP_404_NOT_FOUND, "Enquiry not found")
    return enquiry


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_enquiry(enquiry_in: EnquiryCreate, db: AsyncSession = Depends(get_db)):
    """
    Submit an enquiry. `source` defaults to "website"; `branch_id` is optional
    but must exist when given.
    """
    try:
        await _check_branch_reference(db, enquiry_in.branch_id)
        enquiry = await enquiry_service.create_enquiry(db, enquiry_in)
        return success_response(
            data=EnquiryResponse.model_validate(enquiry),
            message="Enquiry submitted successfully",
            status_code=status.HTTP_201_CREATED,
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error creating enquiry: {str(e)}", exc_info=True)
        await db.rollback()
        raise api_error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to submit enquiry", details=str(e))


@router.get("")
async def list_enquiries(
    branch_id: Optional[str] = None,
    source: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    """List enquiries, newest first, filtered by branch_id and/or source."""
    try:
        branch_filter = parse_id(branch_id, "branch") if branch_id else None
        enquiries = await enquiry_service.list_enquiries(db, branch_id=branch_filter, source=source)
        return success_response(
            data=[EnquiryResponse.model_validate(e) for e in enquiries],
            count=len(enquiries),
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching enquiries: {str(e)}", exc_info=True)
        raise api_error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to fetch enquiries", details=str(e))


@router.get("/{enquiry_id}")
async def get_enquiry(enquiry_id: str, db: AsyncSession = Depends(get_db)):
    try:
        enquiry = await _get_enquiry_or_404(db, enquiry_id)
        return success_response(data=EnquiryResponse.model_validate(enquiry))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching enquiry: {str(e)}", exc_info=True)
        raise api_error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to fetch enquiry", details=str(e))


@router.put("/{enquiry_id}")
async def update_enquiry(
    enquiry_id: str,
    enquiry_in: EnquiryUpdate,
    db: AsyncSession = Depends(get_db),
):
    try:
        enquiry = await _get_enquiry_or_404(db, enquiry_id)
        if "branch_id" in enquiry_in.model_fields_set:
            await _check_branch_reference(db, enquiry_in.branch_id)
        enquiry = await enquiry_service.update_enquiry(db, enquiry, enquiry_in)
        return success_response(
            data=EnquiryResponse.model_validate(enquiry),
            message="Enquiry updated successfully",
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating enquiry: {str(e)}", exc_info=True)
        await db.rollback()
        raise api_error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to update enquiry", details=str(e))


@router.delete("/{enquiry_id}")
async def delete_enquiry(enquiry_id: str, db: AsyncSession = Depends(get_db)):
    try:
        enquiry = await _get_enquiry_or_404(db, enquiry_id)
        data = EnquiryResponse.model_validate(enquiry)
        await enquiry_service.delete_enquiry(db, enquiry)
        return success_response(data=data, message="Enquiry deleted successfully")
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting enquiry: {str(e)}", exc_info=True)
        await db.rollback()
        raise api_error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to delete enquiry", details=str(e))
