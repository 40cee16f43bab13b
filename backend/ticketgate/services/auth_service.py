"""
Demo login: issues a fresh user identity per call.

There are no credentials. Each login creates a user row so seats and orders
have a valid owner to reference.
"""

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from ticketgate.models.user import User
from ticketgate.core.logging import get_logger

logger = get_logger(__name__)

DEMO_PASSWORD_HASH = "demo_hash"


async def demo_login(db: AsyncSession) -> User:
    user_id = uuid.uuid4()
    user = User(
        id=user_id,
        email=f"user_{user_id.hex}@example.com",
        password_hash=DEMO_PASSWORD_HASH,
    )
    db.add(user)
    await db.commit()

    logger.info("demo_user_created", user_id=str(user.id))
    return user
