from app.infrastructure.db.session import SessionLocal
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
import logging
from app.infrastructure.db.models.user_model import UserModel
from app.infrastructure.repositories.attempt_repository import AttemptRepository
from app.application.exam.attempt_service import ExamAttemptService
from app.application.exceptions import ExamServiceError
from app.application.notifications import Notifier, default_notifier
from app.application.permissions import can
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

# auto_error=False so a missing token reaches get_current_user as None
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_notifier() -> Notifier:
    return default_notifier


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> dict:
    """
    Identity stub: the bearer token is the id handed out by /auth/login.
    """
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        user_id = int(token)
    except ValueError:
        logger.warning("Rejected malformed bearer token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = db.query(UserModel).filter(UserModel.id == user_id).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )

    return {
        "user_id": user.id,
        "role": user.role,
    }


def require(capability: str):
    """Dependency factory: the current user must hold ``capability``."""

    def checker(current_user: dict = Depends(get_current_user)) -> dict:
        if not can(current_user.get("role"), capability):
            logger.warning(
                f"Access denied to '{capability}' for user_id: {current_user.get('user_id')}"
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient privileges",
            )
        return current_user

    return checker


def get_attempt_service(
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
) -> ExamAttemptService:
    return ExamAttemptService(db, AttemptRepository(db), notifier=notifier)


def to_http(e: ExamServiceError) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail=str(e))
