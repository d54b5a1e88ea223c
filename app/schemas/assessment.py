from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class Pillar(str, Enum):
    BEHAVIOR = "BEHAVIOR"
    EXECUTION = "EXECUTION"
    MANAGEMENT = "MANAGEMENT"


PILLARS = (Pillar.BEHAVIOR, Pillar.EXECUTION, Pillar.MANAGEMENT)


class AssessmentStatus(str, Enum):
    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"


class AssessmentKind(str, Enum):
    SELF = "self"
    MANAGER = "manager"
    COMMITTEE = "committee"
    PEER_360 = "360"


class Criterion(BaseModel):
    id: str
    description: str = ""
    pillar: Pillar

    model_config = {"frozen": True}


class Answer(BaseModel):
    criterion_id: str
    score: float = Field(..., ge=1, le=5)
    justification: Optional[str] = None


class AssessmentRecord(BaseModel):
    """
    One submitted (or draft) assessment of a collaborator in a cycle.

    Self assessments are authored by the evaluated collaborator. Committee
    assessments carry ``final_score`` instead of answers; 360 assessments
    carry ``overall_score``.
    """
    id: Optional[str] = None
    kind: AssessmentKind
    cycle: str
    author_id: str
    evaluated_user_id: str
    status: AssessmentStatus = AssessmentStatus.SUBMITTED
    answers: List[Answer] = Field(default_factory=list)
    final_score: Optional[float] = None
    overall_score: Optional[float] = None
    justification: Optional[str] = None

    @property
    def is_submitted(self) -> bool:
        return self.status == AssessmentStatus.SUBMITTED


class Collaborator(BaseModel):
    id: str
    name: str
    email: Optional[str] = None
    job_title: Optional[str] = None
    seniority: Optional[str] = None
    business_unit: Optional[str] = None
    career_track: Optional[str] = None
    manager_id: Optional[str] = None
    mentor_id: Optional[str] = None
    roles: List[str] = Field(default_factory=list)
    is_active: bool = True

    model_config = {"from_attributes": True}


class PillarScores(BaseModel):
    BEHAVIOR: Optional[float] = None
    EXECUTION: Optional[float] = None
    MANAGEMENT: Optional[float] = None

    def get(self, pillar: Pillar) -> Optional[float]:
        return getattr(self, Pillar(pillar).value)

    def effective(self, pillar: Pillar, fallback: "PillarScores") -> Optional[float]:
        """This source's score for ``pillar``, or ``fallback``'s when absent."""
        value = self.get(pillar)
        return value if value is not None else fallback.get(pillar)


class PerformanceDataPoint(BaseModel):
    cycle: str
    self_score: PillarScores = Field(default_factory=PillarScores)
    manager_score: PillarScores = Field(default_factory=PillarScores)
    final_score: Optional[float] = None

    def pillar_score(self, pillar: Pillar) -> Optional[float]:
        """Self score for the pillar, falling back to the manager's."""
        return self.self_score.effective(pillar, self.manager_score)


class PerformanceHistory(BaseModel):
    collaborator_id: str
    data_points: List[PerformanceDataPoint] = Field(default_factory=list)  # oldest first
    assessments_submitted_count: int = 0

    @property
    def final_scores(self) -> List[float]:
        return [p.final_score for p in self.data_points if p.final_score is not None]

    @property
    def cycles(self) -> List[str]:
        return [p.cycle for p in self.data_points]

    @property
    def latest(self) -> Optional[PerformanceDataPoint]:
        return self.data_points[-1] if self.data_points else None
