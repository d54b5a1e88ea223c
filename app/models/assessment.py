from sqlalchemy import Column, Integer, String, Text, Float, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import relationship
from app.database import Base


class SelfAssessment(Base):
    __tablename__ = "self_assessments"

    id = Column(Integer, primary_key=True, index=True)
    author_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    cycle = Column(String, nullable=False, index=True)
    status = Column(String, nullable=False, default="DRAFT")  # DRAFT, SUBMITTED
    submitted_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    answers = relationship("SelfAssessmentAnswer", lazy="selectin")

    __table_args__ = (UniqueConstraint("author_id", "cycle", name="uq_self_author_cycle"),)

class SelfAssessmentAnswer(Base):
    __tablename__ = "self_assessment_answers"

    id = Column(Integer, primary_key=True, index=True)
    self_assessment_id = Column(Integer, ForeignKey("self_assessments.id"), nullable=False)
    criterion_id = Column(String, nullable=False)
    score = Column(Integer, nullable=False)  # 1–5
    justification = Column(Text, nullable=True)


class ManagerAssessment(Base):
    __tablename__ = "manager_assessments"

    id = Column(Integer, primary_key=True, index=True)
    author_id = Column(String, ForeignKey("users.id"), nullable=False)
    evaluated_user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    cycle = Column(String, nullable=False, index=True)
    status = Column(String, nullable=False, default="DRAFT")
    submitted_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    answers = relationship("ManagerAssessmentAnswer", lazy="selectin")

    __table_args__ = (
        UniqueConstraint("author_id", "evaluated_user_id", "cycle", name="uq_manager_author_evaluated_cycle"),
    )

class ManagerAssessmentAnswer(Base):
    __tablename__ = "manager_assessment_answers"

    id = Column(Integer, primary_key=True, index=True)
    manager_assessment_id = Column(Integer, ForeignKey("manager_assessments.id"), nullable=False)
    criterion_id = Column(String, nullable=False)
    score = Column(Integer, nullable=False)
    justification = Column(Text, nullable=True)


class CommitteeAssessment(Base):
    __tablename__ = "committee_assessments"

    id = Column(Integer, primary_key=True, index=True)
    author_id = Column(String, ForeignKey("users.id"), nullable=False)
    evaluated_user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    cycle = Column(String, nullable=False, index=True)
    final_score = Column(Float, nullable=False)
    justification = Column(Text, nullable=True)
    observations = Column(Text, nullable=True)
    status = Column(String, nullable=False, default="DRAFT")
    submitted_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (UniqueConstraint("evaluated_user_id", "cycle", name="uq_committee_evaluated_cycle"),)


class Assessment360(Base):
    __tablename__ = "assessments_360"

    id = Column(Integer, primary_key=True, index=True)
    author_id = Column(String, ForeignKey("users.id"), nullable=False)
    evaluated_user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    cycle = Column(String, nullable=False, index=True)
    overall_score = Column(Float, nullable=True)
    strengths = Column(Text, nullable=True)
    improvements = Column(Text, nullable=True)
    status = Column(String, nullable=False, default="DRAFT")
    submitted_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
