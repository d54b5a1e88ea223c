from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.core.auth import get_current_hr
from app.core.exceptions import CollaboratorNotFoundError, InvalidComparisonError, InvalidPillarError
from app.schemas.comparison import EvolutionComparison
from app.schemas.dashboard import HRDashboard, OrganizationalTrends
from app.schemas.evolution import (
    CollaboratorDetailedEvolution,
    CollaboratorEvolutionSummary,
    PillarEvolutionDetail,
)
from app.services.analytics import PerformanceAnalyticsService
from app.services.store import AssessmentStore, SqlAlchemyAssessmentStore

router = APIRouter(prefix="/hr", tags=["hr"])


def get_assessment_store(db: AsyncSession = Depends(get_db)) -> AssessmentStore:
    return SqlAlchemyAssessmentStore(db)


def get_analytics_service(store: AssessmentStore = Depends(get_assessment_store)) -> PerformanceAnalyticsService:
    return PerformanceAnalyticsService(store)


def split_csv(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


@router.get("/dashboard", response_model=HRDashboard)
async def get_evolution_dashboard(
    cycle: Optional[str] = None,
    service: PerformanceAnalyticsService = Depends(get_analytics_service),
    hr = Depends(get_current_hr)
):
    return await service.get_dashboard(cycle)


@router.get("/collaborators/summary", response_model=List[CollaboratorEvolutionSummary])
async def get_collaborators_evolution_summary(
    sortBy: Optional[str] = None,
    sortOrder: Optional[str] = None,
    filterBy: Optional[str] = None,
    service: PerformanceAnalyticsService = Depends(get_analytics_service),
    hr = Depends(get_current_hr)
):
    if sortOrder is not None and sortOrder not in ("asc", "desc"):
        raise HTTPException(400, "sortOrder must be 'asc' or 'desc'")
    return await service.list_evolution_summaries(sortBy, sortOrder, filterBy)


@router.get("/collaborators/{collaborator_id}/detailed", response_model=CollaboratorDetailedEvolution)
async def get_collaborator_detailed_evolution(
    collaborator_id: str,
    service: PerformanceAnalyticsService = Depends(get_analytics_service),
    hr = Depends(get_current_hr)
):
    evolution = await service.get_detailed_evolution(collaborator_id)
    if evolution is None:
        raise HTTPException(404, "Collaborator not found")
    return evolution


@router.get("/comparison", response_model=EvolutionComparison)
async def compare_collaborators_evolution(
    collaboratorIds: Optional[str] = None,
    cycles: Optional[str] = None,
    pillar: Optional[str] = None,
    service: PerformanceAnalyticsService = Depends(get_analytics_service),
    hr = Depends(get_current_hr)
):
    if not collaboratorIds:
        raise HTTPException(400, "collaboratorIds is required")
    try:
        return await service.compare(split_csv(collaboratorIds), split_csv(cycles) or None, pillar)
    except (InvalidComparisonError, InvalidPillarError) as e:
        raise HTTPException(400, str(e))


@router.get("/trends", response_model=OrganizationalTrends)
async def get_organizational_trends(
    startCycle: Optional[str] = None,
    endCycle: Optional[str] = None,
    service: PerformanceAnalyticsService = Depends(get_analytics_service),
    hr = Depends(get_current_hr)
):
    return await service.get_organizational_trends(startCycle, endCycle)


@router.get("/collaborators/{collaborator_id}/pillar-evolution/{pillar}", response_model=PillarEvolutionDetail)
async def get_collaborator_pillar_evolution(
    collaborator_id: str,
    pillar: str,
    service: PerformanceAnalyticsService = Depends(get_analytics_service),
    hr = Depends(get_current_hr)
):
    try:
        return await service.get_pillar_evolution(collaborator_id, pillar)
    except InvalidPillarError as e:
        raise HTTPException(400, str(e))
    except CollaboratorNotFoundError as e:
        raise HTTPException(404, e.reason)
