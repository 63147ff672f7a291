from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Float
from sqlalchemy.orm import relationship
from ..base import Base, utcnow


class ExamModel(Base):
    __tablename__ = "exams"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True, default="")
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False, index=True)
    duration_minutes = Column(Integer, nullable=False)
    passing_percentage = Column(Float, nullable=False)
    scheduled_date = Column(DateTime(timezone=True), nullable=False)
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    # Relationships
    subjects = relationship(
        "ExamSubjectModel",
        cascade="all, delete-orphan",
        order_by="ExamSubjectModel.id",
        passive_deletes=True,
    )
    participant_links = relationship(
        "ExamParticipantModel", cascade="all, delete-orphan", passive_deletes=True
    )

    @property
    def participants(self):
        return [link.user_id for link in self.participant_links]


class ExamSubjectModel(Base):
    """One question-selection rule of an exam."""

    __tablename__ = "exam_subjects"

    id = Column(Integer, primary_key=True, index=True)
    exam_id = Column(Integer, ForeignKey("exams.id", ondelete="CASCADE"), nullable=False)
    subject_id = Column(Integer, ForeignKey("subjects.id"), nullable=False)
    question_count = Column(Integer, nullable=False)
    difficulty = Column(String, nullable=False)  # easy / medium / hard / mixed


class ExamParticipantModel(Base):
    __tablename__ = "exam_participants"

    exam_id = Column(Integer, ForeignKey("exams.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), primary_key=True)
