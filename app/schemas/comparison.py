from pydantic import BaseModel
from typing import Dict, List, Optional

from app.schemas.assessment import Pillar
from app.services.trends import Trend


class ComparedCollaborator(BaseModel):
    id: str
    name: str
    job_title: Optional[str] = None
    seniority: Optional[str] = None
    business_unit: Optional[str] = None


class ComparisonStats(BaseModel):
    average: float
    trend: Trend
    total_cycles: int
    growth_rate: float
    consistency: int


class CollaboratorComparisonData(BaseModel):
    collaborator: ComparedCollaborator
    historical_data: Dict[str, Optional[float]]
    pillar_data: Optional[Dict[Pillar, Dict[str, Optional[float]]]] = None
    stats: ComparisonStats


class ComparisonInsight(BaseModel):
    type: str  # "leader", "most_improved"
    collaborator_id: str
    collaborator_name: str
    description: str
    value: float


class ComparisonSummary(BaseModel):
    total_collaborators: int
    cycles_included: List[str]
    pillar_focus: Optional[Pillar] = None
    group_average: float
    group_standard_deviation: float
    max_difference: float
    top_performer: Optional[str] = None
    most_improved: Optional[str] = None


class EvolutionComparison(BaseModel):
    summary: ComparisonSummary
    collaborators: List[CollaboratorComparisonData]
    insights: List[ComparisonInsight]
    group_averages_by_cycle: Dict[str, float]
    recommendations: List[str]
    analyzed_at: str
