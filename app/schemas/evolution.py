from pydantic import BaseModel, Field
from typing import Dict, List, Optional

from app.schemas.assessment import Pillar
from app.services.trends import Trend, TrendResult


class PillarPerformance(BaseModel):
    behavior: Optional[float] = None
    execution: Optional[float] = None
    management: Optional[float] = None
    best_pillar: Optional[Pillar] = None
    worst_pillar: Optional[Pillar] = None


class CollaboratorEvolutionSummary(BaseModel):
    collaborator_id: str
    name: str
    job_title: Optional[str]
    seniority: Optional[str]
    business_unit: Optional[str]
    latest_score: Optional[float]
    latest_cycle: str
    first_cycle: str
    historical_average: float
    total_cycles: int
    evolution_trend: TrendResult
    pillar_performance: PillarPerformance
    performance_category: str  # "high-performer", "solid-performer", "developing", "critical"
    manager_name: Optional[str] = None


class CohortRanking(BaseModel):
    rank: Optional[int] = None
    total_in_cohort: int = 0
    percentile: Optional[float] = None


class Benchmarking(BaseModel):
    current_score: Optional[float] = None
    business_unit: CohortRanking
    seniority: CohortRanking


class CycleCriterionScore(BaseModel):
    id: str
    description: str
    pillar: Pillar
    self_score: Optional[float] = None
    manager_score: Optional[float] = None
    committee_score: Optional[float] = None

    @property
    def preferred_score(self) -> Optional[float]:
        """Committee score, else manager, else self."""
        for value in (self.committee_score, self.manager_score, self.self_score):
            if value is not None:
                return value
        return None


class CycleDetail(BaseModel):
    cycle: str
    self_assessment_score: Optional[float] = None
    manager_assessment_score: Optional[float] = None
    committee_assessment_score: Optional[float] = None
    peer_assessment_score: Optional[float] = None
    peer_assessment_count: int = 0
    performance_category: Optional[str] = None
    criteria: List[CycleCriterionScore] = Field(default_factory=list)
    comments: List[str] = Field(default_factory=list)


class CriterionEvolution(BaseModel):
    id: str
    description: str
    pillar: Pillar
    self_average: Optional[float] = None
    manager_average: Optional[float] = None
    committee_average: Optional[float] = None
    combined_average: Optional[float] = None


class PillarSummary(BaseModel):
    current_average: Optional[float] = None
    historical_average: Optional[float] = None
    best_score: Optional[float] = None
    worst_score: Optional[float] = None
    total_cycles: int = 0
    overall_trend: Trend = Trend.STABLE
    total_variation: float = 0.0
    consistency_score: int = 100


class AssessmentTypeBreakdown(BaseModel):
    self_assessment: Optional[float] = None
    manager_assessment: Optional[float] = None
    committee_final: Optional[float] = None
    self_vs_manager_gap: Optional[float] = None


class PillarBenchmark(BaseModel):
    vs_organization_average: Optional[float] = None
    percentile_rank: Optional[float] = None
    seniority_ranking: Optional[str] = None
    role_ranking: Optional[str] = None


class Insight(BaseModel):
    type: str  # "strength", "weakness"
    description: str
    related_criterion: Optional[str] = None
    value: Optional[float] = None
    priority: str = "high"


class PillarPrediction(BaseModel):
    expected_score: Optional[float] = None
    confidence_level: int
    key_factors: List[str]
    method: str


class PillarEvolutionDetail(BaseModel):
    collaborator_id: str
    pillar: Pillar
    average: Optional[float] = None
    trend: TrendResult
    criteria: List[CriterionEvolution]
    summary: PillarSummary
    historical_data: Dict[str, Optional[float]]
    assessment_type_breakdown: Dict[str, AssessmentTypeBreakdown]
    benchmark: PillarBenchmark
    insights: List[Insight]
    development_recommendations: List[str]
    prediction: PillarPrediction
    analyzed_at: str


class Predictions(BaseModel):
    next_evaluation_prediction: Optional[float] = None
    confidence_level: int
    improvement_areas: List[str]
    strengths: List[str]
    method: str


class CollaboratorProfile(BaseModel):
    id: str
    name: str
    email: Optional[str] = None
    job_title: Optional[str] = None
    seniority: Optional[str] = None
    business_unit: Optional[str] = None
    career_track: Optional[str] = None
    manager_name: Optional[str] = None
    mentor_name: Optional[str] = None


class EvolutionSummaryStats(BaseModel):
    total_cycles: int
    best_score: Optional[float] = None
    worst_score: Optional[float] = None
    historical_average: float
    overall_trend: Trend
    consistency_score: int


class CollaboratorDetailedEvolution(BaseModel):
    collaborator: CollaboratorProfile
    summary: EvolutionSummaryStats
    cycle_details: List[CycleDetail]
    pillar_evolution: List[PillarEvolutionDetail]
    criteria_evolution: List[CriterionEvolution]
    insights: List[str]
    benchmarking: Benchmarking
    predictions: Predictions
