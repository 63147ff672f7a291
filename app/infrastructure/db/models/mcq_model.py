from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Boolean
from sqlalchemy.orm import relationship
from ..base import Base, utcnow

DIFFICULTY_LEVELS = ("easy", "medium", "hard")


class MCQModel(Base):
    __tablename__ = "mcq_questions"

    id = Column(Integer, primary_key=True, index=True)
    text = Column(String, nullable=False)
    difficulty = Column(String, nullable=False, index=True)  # easy / medium / hard
    subject_id = Column(Integer, ForeignKey("subjects.id"), nullable=False, index=True)
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    # Relationships
    options = relationship(
        "OptionModel",
        back_populates="question",
        cascade="all, delete-orphan",
        order_by="OptionModel.id",
    )
    subject = relationship("SubjectModel", back_populates="questions")


class OptionModel(Base):
    __tablename__ = "mcq_options"

    id = Column(Integer, primary_key=True, index=True)
    question_id = Column(Integer, ForeignKey("mcq_questions.id", ondelete="CASCADE"), nullable=False)
    text = Column(String, nullable=False)
    is_correct = Column(Boolean, default=False, nullable=False)

    # Relationships
    question = relationship("MCQModel", back_populates="options")
