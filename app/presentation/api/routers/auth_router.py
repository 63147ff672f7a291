from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from app.presentation.schemas.user_schema import LoginRequest, LoginResponse, UserProfileResponse
from app.presentation.dependencies import get_db, get_current_user
from app.infrastructure.repositories.user_repository import find_mock_user, UserRepository
from app.application.permissions import capabilities_for
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["Authentication"])


def _profile(user) -> UserProfileResponse:
    return UserProfileResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        capabilities=capabilities_for(user.role),
    )


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    match = find_mock_user(payload.email, payload.password)
    if not match:
        logger.warning(f"Failed login for {payload.email}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    user = UserRepository(db).get_user(match["id"])
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")

    logger.info(f"User {user.id} logged in as {user.role}")
    return LoginResponse(access_token=str(user.id), user=_profile(user))


@router.get("/me", response_model=UserProfileResponse)
def me(current_user: dict = Depends(get_current_user), db: Session = Depends(get_db)):
    user = UserRepository(db).get_user(current_user["user_id"])
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return _profile(user)
