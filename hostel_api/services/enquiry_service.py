"""
User enquiry persistence.
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hostel_api.models import UserEnquiry
from hostel_api.schemas import EnquiryCreate, EnquiryUpdate

logger = logging.getLogger(__name__)

DEFAULT_SOURCE = "website"


async def create_enquiry(db: AsyncSession, enquiry_in: EnquiryCreate) -> UserEnquiry:
    values = enquiry_in.model_dump()
    values["source"] = values.get("source") or DEFAULT_SOURCE
    enquiry = UserEnquiry(**values, created_at=datetime.now(timezone.utc))
    db.add(enquiry)
    await db.commit()
    await db.refresh(enquiry)
    logger.info(f"Created enquiry: ID {enquiry.id} (source: {enquiry.source}, branch: {enquiry.branch_id})")
    return enquiry


async def list_enquiries(
    db: AsyncSession,
    branch_id: Optional[int] = None,
    source: Optional[str] = None,
) -> List[UserEnquiry]:
    """Newest first, optionally filtered by branch and/or source."""
    query = select(UserEnquiry).order_by(UserEnquiry.created_at.desc(), UserEnquiry.id.desc())
    if branch_id is not None:
        query = query.where(UserEnquiry.branch_id == branch_id)
    if source:
        query = query.where(UserEnquiry.source == source)
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_enquiry(db: AsyncSession, enquiry_id: int) -> Optional[UserEnquiry]:
    result = await db.execute(select(UserEnquiry).where(UserEnquiry.id == enquiry_id))
    return result.scalar_one_or_none()


async def update_enquiry(db: AsyncSession, enquiry: UserEnquiry, enquiry_in: EnquiryUpdate) -> UserEnquiry:
    changes = enquiry_in.model_dump(exclude_unset=True)
    for field, value in changes.items():
        setattr(enquiry, field, value)
    await db.commit()
    await db.refresh(enquiry)
    logger.info(f"Updated enquiry: ID {enquiry.id} (fields: {sorted(changes)})")
    return enquiry


async def delete_enquiry(db: AsyncSession, enquiry: UserEnquiry) -> UserEnquiry:
    await db.delete(enquiry)
    await db.commit()
    logger.info(f"Deleted enquiry: ID {enquiry.id}")
    return enquiry
