"""
Gallery image persistence.
Hosted binaries are handled by the image host; this module only manages rows.
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from hostel_api.models import GalleryImage

logger = logging.getLogger(__name__)


async def create_image(db: AsyncSession, values: dict) -> GalleryImage:
    image = GalleryImage(**values, created_at=datetime.now(timezone.utc))
    db.add(image)
    await db.commit()
    await db.refresh(image)
    logger.info(f"Created gallery image: ID {image.id} for branch {image.branch_id}")
    return image


async def list_images(db: AsyncSession, branch_id: Optional[int] = None) -> List[GalleryImage]:
    query = select(GalleryImage).order_by(GalleryImage.display_order.asc(), GalleryImage.id.asc())
    if branch_id is not None:
        query = query.where(GalleryImage.branch_id == branch_id)
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_image(db: AsyncSession, image_id: int, branch_id: Optional[int] = None) -> Optional[GalleryImage]:
    """Fetch an image by id; when branch_id is given both ids must match."""
    query = select(GalleryImage).where(GalleryImage.id == image_id)
    if branch_id is not None:
        query = query.where(GalleryImage.branch_id == branch_id)
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def update_image(db: AsyncSession, image: GalleryImage, changes: dict) -> GalleryImage:
    for field, value in changes.items():
        setattr(image, field, value)
    await db.commit()
    await db.refresh(image)
    logger.info(f"Updated gallery image: ID {image.id} (fields: {sorted(changes)})")
    return image


async def delete_image(db: AsyncSession, image: GalleryImage) -> GalleryImage:
    await db.delete(image)
    await db.commit()
    logger.info(f"Deleted gallery image: ID {image.id}")
    return image


async def delete_images_for_branch(db: AsyncSession, branch_id: int) -> int:
    """
    Delete every gallery row of a branch and return how many went.
    Hosted binaries are left on the image host.
    """
    result = await db.execute(
        delete(GalleryImage).where(GalleryImage.branch_id == branch_id)
    )
    await db.commit()
    logger.info(f"Deleted {result.rowcount} gallery image(s) for branch {branch_id}")
    return result.rowcount
