"""
Branch routes.
Create and update accept either a JSON body or a multipart form with an
optional thumbnail image.
"""
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional, Tuple
import logging

from hostel_api.config import settings
from hostel_api.database import get_db
from hostel_api.schemas import BranchCreate, BranchResponse, BranchUpdate
from hostel_api.services import branch_service
from hostel_api.services.image_host import ImageHost, ImageHostError, get_image_host, upload_file
from hostel_api.utils.form_parsing import coerce_branch_form, is_form_request, read_json_body
from hostel_api.utils.responses import api_error, parse_id, success_response
from starlette.datastructures import UploadFile

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/branches")


async def _read_branch_payload(request: Request) -> Tuple[dict, Optional[UploadFile]]:
    """Return typed branch values and the thumbnail file, if one was sent."""
    if is_form_request(request):
        form = await request.form()
        return coerce_branch_form(form)
    return await read_json_body(request), None


async def _upload_thumbnail(image_host: ImageHost, file: UploadFile, branch_name: Optional[str]) -> str:
    try:
        uploaded = await upload_file(image_host, file, settings.BRANCH_THUMBNAIL_FOLDER, branch_name)
    except ImageHostError as e:
        logger.error(f"Thumbnail upload failed: {e.message}")
        raise api_error(e.status_code, e.message, details=e.details)
    return uploaded.url


async def _get_branch_or_404(db: AsyncSession, raw_id: str):
    branch_id = parse_id(raw_id, "branch")
    branch = await branch_service.get_branch(db, branch_id)
    if not branch:
        raise api_error(status.HTTP_404_NOT_FOUND, "Branch not found")
    return branch


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_branch(
    request: Request,
    db: AsyncSession = Depends(get_db),
    image_host: ImageHost = Depends(get_image_host),
):
    """
    Create a branch.

    Form submissions carry list fields as JSON strings, booleans as
    "true"/"false" and numbers as text; an `image` file becomes the thumbnail.

    Raises:
        HTTPException: 400 on malformed input, 500/502 if the thumbnail upload fails
    """
    try:
        values, image_file = await _read_branch_payload(request)
        values = {k: v for k, v in values.items() if v is not None}

        try:
            branch_in = BranchCreate.model_validate(values)
        except ValidationError as e:
            raise RequestValidationError(e.errors(include_url=False, include_context=False))

        if image_file is not None:
            branch_in.thumbnail = await _upload_thumbnail(image_host, image_file, branch_in.name)

        branch = await branch_service.create_branch(db, branch_in)

        return success_response(
            data=BranchResponse.model_validate(branch),
            message="Branch created successfully",
            status_code=status.HTTP_201_CREATED,
        )

    except (HTTPException, RequestValidationError):
        raise
    except Exception as e:
        logger.error(f"Error creating branch: {str(e)}", exc_info=True)
        await db.rollback()
        raise api_error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to create branch", details=str(e))


@router.get("")
async def list_branches(db: AsyncSession = Depends(get_db)):
    """List all branches ordered by display_order (ties by id)."""
    try:
        branches = await branch_service.list_branches(db)
        logger.info(f"Retrieved {len(branches)} branches")
        return success_response(
            data=[BranchResponse.model_validate(b) for b in branches],
            count=len(branches),
        )
    except Exception as e:
        logger.error(f"Error fetching branches: {str(e)}", exc_info=True)
        raise api_error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to fetch branches", details=str(e))


@router.get("/{branch_id}")
async def get_branch(branch_id: str, db: AsyncSession = Depends(get_db)):
    try:
        branch = await _get_branch_or_404(db, branch_id)
        return success_response(data=BranchResponse.model_validate(branch))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching branch: {str(e)}", exc_info=True)
        raise api_error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to fetch branch", details=str(e))


@router.api_route("/{branch_id}", methods=["PUT", "PATCH"])
async def update_branch(
    branch_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    image_host: ImageHost = Depends(get_image_host),
):
    """
    Partially update a branch.

    Only fields present in the request change; updated_at is always refreshed.
    A new `image` file replaces the thumbnail URL.

    Raises:
        HTTPException: 400 on malformed input, 404 if the branch does not exist
    """
    try:
        branch = await _get_branch_or_404(db, branch_id)
        values, image_file = await _read_branch_payload(request)

        try:
            branch_in = BranchUpdate.model_validate(values)
        except ValidationError as e:
            raise RequestValidationError(e.errors(include_url=False, include_context=False))

        if image_file is not None:
            branch_in.thumbnail = await _upload_thumbnail(image_host, image_file, branch_in.name or branch.name)

        branch = await branch_service.update_branch(db, branch, branch_in)

        return success_response(
            data=BranchResponse.model_validate(branch),
            message="Branch updated successfully",
        )

    except (HTTPException, RequestValidationError):
        raise
    except Exception as e:
        logger.error(f"Error updating branch: {str(e)}", exc_info=True)
        await db.rollback()
        raise api_error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to update branch", details=str(e))


@router.delete("/{branch_id}")
async def delete_branch(branch_id: str, db: AsyncSession = Depends(get_db)):
    """
    Delete a branch and its gallery rows; its enquiries are kept with no branch.
    Returns the deleted record.
    """
    try:
        branch = await _get_branch_or_404(db, branch_id)
        data = BranchResponse.model_validate(branch)
        await branch_service.delete_branch(db, branch)
        return success_response(data=data, message="Branch deleted successfully")
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting branch: {str(e)}", exc_info=True)
        await db.rollback()
        raise api_error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to delete branch", details=str(e))
