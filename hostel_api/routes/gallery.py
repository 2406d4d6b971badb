"""
Gallery routes.
Images are created from an already hosted URL or uploaded through the image
host; branch-scoped routes address images by (branch id, image id).
"""
from fastapi import APIRouter, Body, Depends, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile
from typing import Optional
import logging

from hostel_api.config import settings
from hostel_api.database import get_db
from hostel_api.schemas import (
    GalleryImageCreate,
    GalleryImageResponse,
    GalleryImageUpdate,
    HostedImageDeleteRequest,
)
from hostel_api.services import branch_service, gallery_service
from hostel_api.services.image_host import (
    NOT_FOUND,
    ImageHost,
    ImageHostError,
    get_image_host,
    upload_file,
)
from hostel_api.utils.form_parsing import form_text, parse_int_field, parse_tags, read_json_body
from hostel_api.utils.responses import api_error, parse_id, success_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/gallery")


async def _require_branch(db: AsyncSession, branch_id: Optional[int]) -> int:
    """Gallery rows must point at an existing branch."""
    if branch_id is None:
        raise api_error(status.HTTP_400_BAD_REQUEST, "branch_id is required")
    if not await branch_service.get_branch(db, branch_id):
        raise api_error(status.HTTP_400_BAD_REQUEST, "Branch not found", details=f"Branch ID {branch_id} does not exist")
    return branch_id


async def _resolve_upload_branch(db: AsyncSession, branch_id: Optional[str], branch_name: Optional[str]) -> int:
    """
    Resolve the branch for an upload: an existing branch_id wins, otherwise
    the first branch whose name matches exactly.
    """
    if branch_id and branch_id.strip():
        try:
            parsed_id = int(branch_id.strip())
        except ValueError:
            parsed_id = None
        if parsed_id is not None and await branch_service.get_branch(db, parsed_id):
            return parsed_id

    if branch_name and branch_name.strip():
        branch = await branch_service.find_branch_by_name(db, branch_name.strip())
        if branch:
            return branch.id

    raise api_error(status.HTTP_400_BAD_REQUEST, "branch_id or branch_name is required and must exist")


def _validation_error(e: ValidationError) -> RequestValidationError:
    return RequestValidationError(e.errors(include_url=False, include_context=False))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_gallery_image(
    image_in: GalleryImageCreate,
    db: AsyncSession = Depends(get_db),
):
    """Create a gallery row for an image that is already hosted."""
    try:
        await _require_branch(db, image_in.branch_id)
        image = await gallery_service.create_image(db, image_in.model_dump())
        return success_response(
            data=GalleryImageResponse.model_validate(image),
            message="Gallery image created successfully",
            status_code=status.HTTP_201_CREATED,
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error creating gallery image: {str(e)}", exc_info=True)
        await db.rollback()
        raise api_error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to create gallery image", details=str(e))


@router.post("/upload", status_code=status.HTTP_201_CREATED)
async def upload_gallery_image(
    request: Request,
    db: AsyncSession = Depends(get_db),
    image_host: ImageHost = Depends(get_image_host),
):
    """
    Upload an image file and store the hosted URL as a gallery row.

    Accepts multipart/form-data: file, branch_id or branch_name, and optional
    title, description, tags (comma-joined or repeated) and display_order.

    Raises:
        HTTPException: 400 if the file or branch is missing, the image host's
            status if the upload fails. No row is written on failure.
    """
    try:
        form = await request.form()

        file = form.get("file")
        if not isinstance(file, UploadFile) or not file.filename:
            raise api_error(status.HTTP_400_BAD_REQUEST, "No file uploaded (field name: file)")

        branch_id = await _resolve_upload_branch(db, form_text(form, "branch_id"), form_text(form, "branch_name"))

        title = form_text(form, "title")
        display_order = parse_int_field("display_order", form_text(form, "display_order"))

        try:
            uploaded = await upload_file(image_host, file, settings.GALLERY_FOLDER, title)
        except ImageHostError as e:
            logger.error(f"Gallery upload failed: {e.message}")
            raise api_error(e.status_code, e.message, details=e.details)

        image = await gallery_service.create_image(db, {
            "branch_id": branch_id,
            "image_url": uploaded.url,
            "title": title,
            "description": form_text(form, "description"),
            "tags": parse_tags(form.getlist("tags")),
            "display_order": display_order or 0,
        })

        return success_response(
            data=GalleryImageResponse.model_validate(image),
            message="Image uploaded and saved to gallery",
            status_code=status.HTTP_201_CREATED,
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error uploading gallery image: {str(e)}", exc_info=True)
        await db.rollback()
        raise api_error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to upload image", details=str(e))


@router.get("")
async def list_gallery_images(
    branch_id: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    """List gallery images, optionally for one branch."""
    try:
        branch_filter = parse_id(branch_id, "branch") if branch_id else None
        images = await gallery_service.list_images(db, branch_filter)
        return success_response(
            data=[GalleryImageResponse.model_validate(img) for img in images],
            count=len(images),
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching gallery images: {str(e)}", exc_info=True)
        raise api_error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to fetch gallery images", details=str(e))


@router.delete("/delete-from-host")
async def delete_from_host(
    payload: HostedImageDeleteRequest = Body(...),
    image_host: ImageHost = Depends(get_image_host),
):
    """
    Remove an image binary from the image host.

    Gallery rows are not touched; delete the row separately for full cleanup.

    Raises:
        HTTPException: 400 if the identifier the configured host deletes by
            is missing, 404 if the host does not know the image, 500 if
            credentials are missing
    """
    try:
        target = image_host.deletion_target(image_url=payload.image_url, public_id=payload.public_id)
    except ImageHostError as e:
        raise api_error(e.status_code, e.message)

    try:
        result = await image_host.delete(target)
    except ImageHostError as e:
        logger.error(f"Hosted image deletion failed for {target}: {e.message}")
        raise api_error(e.status_code, e.message, details=e.details)
    except Exception as e:
        logger.error(f"Error deleting hosted image: {str(e)}", exc_info=True)
        raise api_error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to delete image from host", details=str(e))

    if result == NOT_FOUND:
        raise api_error(status.HTTP_404_NOT_FOUND, "Image not found on host", details=target)

    return success_response(
        data={"target": target, "result": result, "provider": image_host.name},
        message="Image deleted from host successfully",
    )


@router.get("/{image_id}")
async def get_gallery_image(image_id: str, db: AsyncSession = Depends(get_db)):
    try:
        image = await gallery_service.get_image(db, parse_id(image_id, "gallery"))
        if not image:
            raise api_error(status.HTTP_404_NOT_FOUND, "Gallery image not found")
        return success_response(data=GalleryImageResponse.model_validate(image))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching gallery image: {str(e)}", exc_info=True)
        raise api_error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to fetch gallery image", details=str(e))


@router.put("/{image_id}")
async def update_gallery_image(
    image_id: str,
    image_update: GalleryImageUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Apply the supplied fields to a gallery image."""
    try:
        image = await gallery_service.get_image(db, parse_id(image_id, "gallery"))
        if not image:
            raise api_error(status.HTTP_404_NOT_FOUND, "Gallery image not found")

        changes = image_update.model_dump(exclude_unset=True)
        if "branch_id" in changes:
            await _require_branch(db, changes["branch_id"])

        image = await gallery_service.update_image(db, image, changes)
        return success_response(
            data=GalleryImageResponse.model_validate(image),
            message="Gallery image updated successfully",
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating gallery image: {str(e)}", exc_info=True)
        await db.rollback()
        raise api_error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to update gallery image", details=str(e))


@router.delete("/{image_id}")
async def delete_gallery_image(image_id: str, db: AsyncSession = Depends(get_db)):
    """Delete a gallery row. The hosted binary is left in place."""
    try:
        image = await gallery_service.get_image(db, parse_id(image_id, "gallery"))
        if not image:
            raise api_error(status.HTTP_404_NOT_FOUND, "Gallery image not found")
        data = GalleryImageResponse.model_validate(image)
        await gallery_service.delete_image(db, image)
        return success_response(data=data, message="Gallery image deleted successfully")
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting gallery image: {str(e)}", exc_info=True)
        await db.rollback()
        raise api_error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to delete gallery image", details=str(e))


# Branch-scoped endpoints

@router.get("/branch/{branch_id}")
async def list_branch_gallery_images(branch_id: str, db: AsyncSession = Depends(get_db)):
    """Images of one branch ordered by display_order."""
    try:
        images = await gallery_service.list_images(db, parse_id(branch_id, "branch"))
        return success_response(
            data=[GalleryImageResponse.model_validate(img) for img in images],
            count=len(images),
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching branch gallery images: {str(e)}", exc_info=True)
        raise api_error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to fetch branch gallery images", details=str(e))


@router.post("/branch/{branch_id}", status_code=status.HTTP_201_CREATED)
async def add_branch_gallery_image(
    branch_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    """Create a gallery row for the branch in the path."""
    try:
        parsed_branch_id = parse_id(branch_id, "branch")
        body = await read_json_body(request)
        body["branch_id"] = parsed_branch_id

        try:
            image_in = GalleryImageCreate.model_validate(body)
        except ValidationError as e:
            raise _validation_error(e)

        await _require_branch(db, parsed_branch_id)
        image = await gallery_service.create_image(db, image_in.model_dump())
        return success_response(
            data=GalleryImageResponse.model_validate(image),
            message="Gallery image added to branch successfully",
            status_code=status.HTTP_201_CREATED,
        )
    except (HTTPException, RequestValidationError):
        raise
    except Exception as e:
        logger.error(f"Error adding gallery image to branch: {str(e)}", exc_info=True)
        await db.rollback()
        raise api_error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to add gallery image to branch", details=str(e))


def _parse_branch_image_ids(branch_id: str, image_id: str):
    try:
        return int(branch_id), int(image_id)
    except ValueError:
        raise api_error(status.HTTP_400_BAD_REQUEST, "Invalid branch ID or image ID")


@router.put("/branch/{branch_id}/image/{image_id}")
async def update_branch_gallery_image(
    branch_id: str,
    image_id: str,
    image_update: GalleryImageUpdate,
    db: AsyncSession = Depends(get_db),
):
    """
    Update an image only if it belongs to the branch in the path.
    A branch_id in the body is ignored; ownership cannot move through this route.
    """
    try:
        parsed_branch_id, parsed_image_id = _parse_branch_image_ids(branch_id, image_id)
        image = await gallery_service.get_image(db, parsed_image_id, branch_id=parsed_branch_id)
        if not image:
            raise api_error(status.HTTP_404_NOT_FOUND, "Gallery image not found for this branch")

        changes = image_update.model_dump(exclude_unset=True)
        changes.pop("branch_id", None)

        image = await gallery_service.update_image(db, image, changes)
        return success_response(
            data=GalleryImageResponse.model_validate(image),
            message="Branch gallery image updated successfully",
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating branch gallery image: {str(e)}", exc_info=True)
        await db.rollback()
        raise api_error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to update branch gallery image", details=str(e))


@router.delete("/branch/{branch_id}/image/{image_id}")
async def delete_branch_gallery_image(
    branch_id: str,
    image_id: str,
    db: AsyncSession = Depends(get_db),
):
    try:
        parsed_branch_id, parsed_image_id = _parse_branch_image_ids(branch_id, image_id)
        image = await gallery_service.get_image(db, parsed_image_id, branch_id=parsed_branch_id)
        if not image:
            raise api_error(status.HTTP_404_NOT_FOUND, "Gallery image not found for this branch")
        data = GalleryImageResponse.model_validate(image)
        await gallery_service.delete_image(db, image)
        return success_response(data=data, message="Gallery image removed from branch successfully")
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting branch gallery image: {str(e)}", exc_info=True)
        await db.rollback()
        raise api_error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to delete branch gallery image", details=str(e))


@router.delete("/branch/{branch_id}")
async def delete_all_branch_gallery_images(branch_id: str, db: AsyncSession = Depends(get_db)):
    """
    Delete every gallery row of a branch. Zero matches is still a success.
    Hosted binaries stay on the image host; use delete-from-host for those.
    """
    try:
        deleted = await gallery_service.delete_images_for_branch(db, parse_id(branch_id, "branch"))
        return success_response(
            count=deleted,
            message=f"All gallery images ({deleted}) removed from branch successfully",
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting all branch gallery images: {str(e)}", exc_info=True)
        await db.rollback()
        raise api_error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to delete all branch gallery images", details=str(e))
