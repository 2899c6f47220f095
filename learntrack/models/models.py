from learntrack.config import Base
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, Boolean, UniqueConstraint
from sqlalchemy.orm import relationship
from learntrack.utils.common import utcnow


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False)
    hashed_password = Column(String, nullable=False)
    role = Column(String, default="user", nullable=False)  # user|admin
    created_at = Column(DateTime, default=utcnow, nullable=False)


class ModuleProgress(Base):
    __tablename__ = "user_progress"
    __table_args__ = (UniqueConstraint("user_id", "module_id", name="uq_user_progress_user_module"),)

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    module_id = Column(Integer, nullable=False)  # 1..15, see learntrack.catalog
    progress = Column(Integer, default=0, nullable=False)  # percent, never decreases
    completed = Column(Boolean, default=False, nullable=False)
    score = Column(Integer, default=0, nullable=False)  # best score so far
    time_spent = Column(Integer, default=0, nullable=False)  # minutes, accumulated
    last_accessed = Column(DateTime, default=utcnow, nullable=False)

    user = relationship("User", backref="module_progress", foreign_keys=[user_id])


class AssessmentResult(Base):
    __tablename__ = "assessments"
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    module_id = Column(Integer, nullable=False)
    score = Column(Integer, nullable=False)
    total_questions = Column(Integer, nullable=False)
    correct_answers = Column(Integer, nullable=False)
    time_spent = Column(String, nullable=True)  # as reported by the quiz page, e.g. "4:35"
    feedback = Column(Text, nullable=True)
    taken_at = Column(DateTime, default=utcnow, nullable=False, index=True)

    user = relationship("User", backref="assessments", foreign_keys=[user_id])
