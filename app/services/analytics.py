"""
Read-only analytics queries.

Each method performs one batched read of the assessment store and then
computes its view in memory; nothing is cached between calls.
"""

import logging
from typing import List, Optional, Sequence

from app.core.exceptions import InvalidPillarError
from app.schemas.assessment import Pillar
from app.schemas.comparison import EvolutionComparison
from app.schemas.dashboard import HRDashboard, OrganizationalTrends
from app.schemas.evolution import (
    CollaboratorDetailedEvolution,
    CollaboratorEvolutionSummary,
    PillarEvolutionDetail,
)
from app.services.comparison import compare_collaborators, parse_pillar, validate_collaborator_ids
from app.services.dashboard import build_dashboard, build_organizational_trends
from app.services.evolution import build_detailed_evolution, build_evolution_summaries, build_pillar_deep_dive
from app.services.store import AssessmentStore, load_snapshot

logger = logging.getLogger(__name__)


class PerformanceAnalyticsService:
    def __init__(self, store: AssessmentStore):
        self.store = store

    async def get_dashboard(self, cycle: Optional[str] = None) -> HRDashboard:
        snapshot = await load_snapshot(self.store)
        return build_dashboard(snapshot, cycle)

    async def list_evolution_summaries(
        self,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        filter_by: Optional[str] = None,
    ) -> List[CollaboratorEvolutionSummary]:
        snapshot = await load_snapshot(self.store)
        return build_evolution_summaries(snapshot, sort_by, sort_order, filter_by)

    async def get_detailed_evolution(self, collaborator_id: str) -> Optional[CollaboratorDetailedEvolution]:
        if await self.store.get_collaborator(collaborator_id) is None:
            return None
        snapshot = await load_snapshot(self.store)
        return build_detailed_evolution(snapshot, collaborator_id)

    async def compare(
        self,
        collaborator_ids: Sequence[str],
        cycles: Optional[Sequence[str]] = None,
        pillar: Optional[str] = None,
    ) -> EvolutionComparison:
        # reject bad input before touching the store
        ids = validate_collaborator_ids(collaborator_ids)
        parse_pillar(pillar)
        snapshot = await load_snapshot(self.store, collaborator_ids=ids, active_only=False)
        return compare_collaborators(snapshot, ids, cycles, pillar)

    async def get_pillar_evolution(self, collaborator_id: str, pillar: str) -> PillarEvolutionDetail:
        try:
            pillar_value = Pillar(str(pillar).upper())
        except ValueError:
            raise InvalidPillarError(f"Unknown pillar: {pillar}")
        snapshot = await load_snapshot(self.store)
        return build_pillar_deep_dive(snapshot, collaborator_id, pillar_value)

    async def get_organizational_trends(
        self,
        start_cycle: Optional[str] = None,
        end_cycle: Optional[str] = None,
    ) -> OrganizationalTrends:
        snapshot = await load_snapshot(self.store)
        return build_organizational_trends(snapshot, start_cycle, end_cycle)
