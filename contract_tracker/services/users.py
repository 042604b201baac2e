"""
Contract Tracker — User lookups and the default admin seed.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from contract_tracker.config import settings
from contract_tracker.models.user import User

logger = logging.getLogger(__name__)


async def ensure_default_admin(db: AsyncSession) -> User:
    """Create the configured admin account unless an admin already exists."""
    result = await db.execute(select(User).where(User.role == "admin").limit(1))
    admin = result.scalar_one_or_none()
    if admin:
        return admin

    admin = User(
        name=settings.default_admin_name,
        email=settings.default_admin_email,
        role="admin",
    )
    db.add(admin)
    await db.commit()
    await db.refresh(admin)
    logger.info(f"✅ Default admin created: {admin.email}")
    return admin


async def get_user(db: AsyncSession, user_id: int) -> User | None:
    return await db.get(User, user_id)
