from sqlalchemy import Column, Integer, ForeignKey, DateTime, Boolean, Float, Index, text
from sqlalchemy.orm import relationship
from ..base import Base, utcnow


class ExamAttemptModel(Base):
    __tablename__ = "exam_attempts"

    id = Column(Integer, primary_key=True, index=True)
    exam_id = Column(Integer, ForeignKey("exams.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    start_time = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    end_time = Column(DateTime(timezone=True), nullable=True)
    score = Column(Float, nullable=True)
    passed = Column(Boolean, nullable=True)
    # Nominal question total of the exam rules when the attempt started
    requested_questions = Column(Integer, nullable=False, default=0)

    # Relationships
    answers = relationship(
        "AttemptAnswerModel",
        cascade="all, delete-orphan",
        order_by="AttemptAnswerModel.id",
        passive_deletes=True,
    )
    questions = relationship(
        "AttemptQuestionModel",
        cascade="all, delete-orphan",
        order_by="AttemptQuestionModel.position",
        passive_deletes=True,
    )

    # At most one open attempt per (user, exam)
    __table_args__ = (
        Index(
            "uq_open_attempt_per_user_exam",
            "user_id",
            "exam_id",
            unique=True,
            sqlite_where=text("end_time IS NULL"),
            postgresql_where=text("end_time IS NULL"),
        ),
    )

    @property
    def is_open(self) -> bool:
        return self.end_time is None

    @property
    def question_ids(self):
        return [q.question_id for q in self.questions]

    @property
    def shortfall(self) -> int:
        return max((self.requested_questions or 0) - len(self.questions), 0)


class AttemptAnswerModel(Base):
    __tablename__ = "attempt_answers"

    id = Column(Integer, primary_key=True, index=True)
    attempt_id = Column(Integer, ForeignKey("exam_attempts.id", ondelete="CASCADE"), nullable=False, index=True)
    # Option ids are not stable across question edits, so no foreign keys here
    question_id = Column(Integer, nullable=False)
    selected_option_id = Column(Integer, nullable=False)


class AttemptQuestionModel(Base):
    """The question set drawn for an attempt, frozen when the attempt starts."""

    __tablename__ = "attempt_questions"

    attempt_id = Column(Integer, ForeignKey("exam_attempts.id", ondelete="CASCADE"), primary_key=True)
    position = Column(Integer, primary_key=True)
    question_id = Column(Integer, nullable=False)
