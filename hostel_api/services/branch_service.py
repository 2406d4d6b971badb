"""
Branch persistence.
All functions take already-typed values; request parsing happens in the routes.
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hostel_api.models import Branch
from hostel_api.schemas import BranchCreate, BranchUpdate

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


async def create_branch(db: AsyncSession, branch_in: BranchCreate) -> Branch:
    now = utcnow()
    branch = Branch(**branch_in.model_dump(mode="json"), created_at=now, updated_at=now)
    db.add(branch)
    await db.commit()
    await db.refresh(branch)
    logger.info(f"Created branch: ID {branch.id} ({branch.name})")
    return branch


async def list_branches(db: AsyncSession) -> List[Branch]:
    result = await db.execute(
        select(Branch).order_by(Branch.display_order.asc(), Branch.id.asc())
    )
    return list(result.scalars().all())


async def get_branch(db: AsyncSession, branch_id: int) -> Optional[Branch]:
    result = await db.execute(select(Branch).where(Branch.id == branch_id))
    return result.scalar_one_or_none()


async def find_branch_by_name(db: AsyncSession, name: str) -> Optional[Branch]:
    """Exact-name lookup; the lowest id wins when names repeat."""
    result = await db.execute(
        select(Branch).where(Branch.name == name).order_by(Branch.id.asc()).limit(1)
    )
    return result.scalar_one_or_none()


async def update_branch(db: AsyncSession, branch: Branch, branch_in: BranchUpdate) -> Branch:
    """Apply only the fields the caller supplied and bump updated_at."""
    changes = branch_in.model_dump(mode="json", exclude_unset=True)
    for field, value in changes.items():
        setattr(branch, field, value)
    branch.updated_at = utcnow()
    await db.commit()
    await db.refresh(branch)
    logger.info(f"Updated branch: ID {branch.id} (fields: {sorted(changes)})")
    return branch


async def delete_branch(db: AsyncSession, branch: Branch) -> Branch:
    """
    Delete a branch. Its gallery rows are deleted and its enquiries keep
    existing with branch_id set to null.
    """
    await db.delete(branch)
    await db.commit()
    logger.info(f"Deleted branch: ID {branch.id}")
    return branch
