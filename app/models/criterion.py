from sqlalchemy import Column, String, Text, Boolean
from app.database import Base

class Criterion(Base):
    __tablename__ = "criteria"

    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    pillar = Column(String, nullable=False)  # BEHAVIOR, EXECUTION, MANAGEMENT
    is_required = Column(Boolean, default=True)
