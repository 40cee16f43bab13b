"""
Demo authentication endpoint.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ticketgate.db.session import get_db
from ticketgate.schemas.user import LoginResponse
from ticketgate.services.auth_service import demo_login

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/login", response_model=LoginResponse)
async def login(db: AsyncSession = Depends(get_db)):
    """Issue a new demo user identity."""
    user = await demo_login(db)
    return LoginResponse(user_id=user.id, email=user.email)
