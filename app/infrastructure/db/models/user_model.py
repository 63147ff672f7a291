#user_model.py
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy import UniqueConstraint
from ..base import Base, utcnow


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False, index=True)
    role = Column(String, nullable=False)  # "admin", "instructor" or "participant"
    created_at = Column(DateTime(timezone=True), default=utcnow)

    __table_args__ = (
        UniqueConstraint("email", name="uq_email_user"),
    )
