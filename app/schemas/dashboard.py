from pydantic import BaseModel, Field
from typing import Dict, List, Optional

from app.schemas.assessment import Pillar
from app.services.trends import Trend, TrendResult


class OrganizationStats(BaseModel):
    total_collaborators: int
    collaborators_with_history: int
    current_cycle: Optional[str] = None
    previous_cycle: Optional[str] = None
    current_overall_average: float
    previous_overall_average: Optional[float] = None
    organization_growth_percentage: float


class DistributionPercentages(BaseModel):
    high_performers: float = 0.0
    solid_performers: float = 0.0
    developing: float = 0.0
    critical: float = 0.0


class PerformanceDistribution(BaseModel):
    high_performers: int = 0
    solid_performers: int = 0
    developing: int = 0
    critical: int = 0
    percentages: DistributionPercentages = Field(default_factory=DistributionPercentages)

    @property
    def total(self) -> int:
        return self.high_performers + self.solid_performers + self.developing + self.critical


class TrendAnalysis(BaseModel):
    improving: int = 0
    declining: int = 0
    stable: int = 0
    fastest_growing_pillar: Optional[Pillar] = None
    pillar_needing_attention: Optional[Pillar] = None
    pillar_growth: Dict[Pillar, Optional[float]] = Field(default_factory=dict)


class Highlight(BaseModel):
    type: str  # "achievement", "concern"
    title: str
    description: str
    value: float
    priority: str  # "high", "medium"


class HRDashboard(BaseModel):
    organization_stats: OrganizationStats
    performance_distribution: PerformanceDistribution
    trend_analysis: TrendAnalysis
    highlights: List[Highlight]
    last_updated: str


class TrendPeriod(BaseModel):
    start_cycle: Optional[str] = None
    end_cycle: Optional[str] = None
    total_cycles: int = 0


class GroupTrend(BaseModel):
    key: str
    collaborators: int
    averages_by_cycle: Dict[str, float]
    trend: TrendResult


class ExecutiveSummary(BaseModel):
    overall_trend: Trend
    key_findings: List[str]
    concern_areas: List[str]


class OrganizationalTrends(BaseModel):
    period: TrendPeriod
    organization_averages_by_cycle: Dict[str, float]
    pillar_trends: List[GroupTrend]
    business_unit_trends: List[GroupTrend]
    seniority_trends: List[GroupTrend]
    executive_summary: ExecutiveSummary
    analyzed_at: str
