from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from ..base import Base, utcnow


class CourseModel(Base):
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    code = Column(String, nullable=False)
    description = Column(String, nullable=True, default="")
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    # Relationships
    subject_links = relationship(
        "CourseSubjectModel", cascade="all, delete-orphan", passive_deletes=True
    )
    participant_links = relationship(
        "CourseParticipantModel", cascade="all, delete-orphan", passive_deletes=True
    )

    @property
    def subjects(self):
        return [link.subject_id for link in self.subject_links]

    @property
    def participants(self):
        return [link.user_id for link in self.participant_links]


class CourseSubjectModel(Base):
    __tablename__ = "course_subjects"

    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), primary_key=True)
    subject_id = Column(Integer, ForeignKey("subjects.id"), primary_key=True, index=True)


class CourseParticipantModel(Base):
    __tablename__ = "course_participants"

    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), primary_key=True)
