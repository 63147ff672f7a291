from typing import Optional
import logging

from sqlalchemy.orm import Session

from app.infrastructure.db.models import UserModel
from app.infrastructure.db.retry import retry_read
from app.application.exceptions import NotFoundError
from app.application.permissions import ADMIN, INSTRUCTOR, PARTICIPANT

logger = logging.getLogger(__name__)

# Fixed development user list; login is a lookup against it
MOCK_USERS = [
    {"id": 1, "email": "admin@techz.com", "name": "Admin User", "role": ADMIN, "password": "admin123"},
    {"id": 2, "email": "instructor@techz.com", "name": "Instructor User", "role": INSTRUCTOR, "password": "instructor123"},
    {"id": 3, "email": "participant@techz.com", "name": "Participant User", "role": PARTICIPANT, "password": "participant123"},
]


def seed_users(db: Session) -> int:
    """Insert any missing fixed users. Returns how many were added."""
    added = 0
    for u in MOCK_USERS:
        if db.query(UserModel.id).filter(UserModel.id == u["id"]).first():
            continue
        db.add(UserModel(id=u["id"], name=u["name"], email=u["email"], role=u["role"]))
        added += 1
    if added:
        db.commit()
        logger.info(f"Seeded {added} users")
    return added


def find_mock_user(email: str, password: str) -> Optional[dict]:
    for u in MOCK_USERS:
        if u["email"].lower() == email.lower() and u["password"] == password:
            return u
    return None


def check_users_exist(db: Session, user_ids) -> None:
    """Raise NotFoundError naming any id that is not a known user."""
    user_ids = set(user_ids)
    if not user_ids:
        return
    found = {row.id for row in db.query(UserModel.id).filter(UserModel.id.in_(user_ids)).all()}
    missing = user_ids - found
    if missing:
        raise NotFoundError(f"Users not found: {sorted(missing)}")


class UserRepository:
    def __init__(self, db: Session):
        self.db = db

    @retry_read
    def get_user(self, user_id: int) -> Optional[UserModel]:
        return self.db.query(UserModel).filter(UserModel.id == user_id).first()
