from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, JSON, func
from app.database import Base

class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, index=True)
    email = Column(String, unique=True, nullable=False)
    name = Column(String, nullable=False)
    job_title = Column(String, nullable=True)
    seniority = Column(String, nullable=True)
    business_unit = Column(String, nullable=True)
    career_track = Column(String, nullable=True)
    manager_id = Column(String, ForeignKey("users.id"), nullable=True)
    mentor_id = Column(String, ForeignKey("users.id"), nullable=True)
    roles = Column(JSON, nullable=False, default=list)  # e.g. ["colaborador", "hr"]
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
