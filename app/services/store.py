"""
Read access to submitted assessments and the collaborator directory.

All analytics views work on an ``AnalyticsSnapshot``: one batched read per
assessment kind, grouped in memory by evaluated collaborator.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.assessment import Assessment360, CommitteeAssessment, ManagerAssessment, SelfAssessment
from app.models.criterion import Criterion as CriterionModel
from app.models.user import User
from app.schemas.assessment import (
    Answer,
    AssessmentKind,
    AssessmentRecord,
    AssessmentStatus,
    Collaborator,
    Criterion,
    PerformanceHistory,
    Pillar,
)
from app.services.aggregation import CriteriaLookup, build_performance_history

logger = logging.getLogger(__name__)


class AssessmentStore(ABC):
    """Source of criteria, submitted assessments and collaborators."""

    @abstractmethod
    async def list_criteria(self) -> List[Criterion]:
        ...

    @abstractmethod
    async def list_assessments(
        self,
        kind: AssessmentKind,
        collaborator_ids: Optional[Sequence[str]] = None,
        cycle: Optional[str] = None,
    ) -> List[AssessmentRecord]:
        """SUBMITTED assessments of ``kind``, optionally for given evaluated collaborators / cycle."""

    @abstractmethod
    async def list_collaborators(
        self,
        active_only: bool = True,
        ids: Optional[Sequence[str]] = None,
    ) -> List[Collaborator]:
        ...

    @abstractmethod
    async def get_collaborator(self, collaborator_id: str) -> Optional[Collaborator]:
        ...


def _answers(rows) -> List[Answer]:
    return [
        Answer(criterion_id=a.criterion_id, score=a.score, justification=a.justification)
        for a in rows or []
    ]


class SqlAlchemyAssessmentStore(AssessmentStore):
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_criteria(self) -> List[Criterion]:
        result = await self.db.execute(select(CriterionModel))
        criteria = []
        for c in result.scalars():
            try:
                pillar = Pillar(str(c.pillar).upper())
            except ValueError:
                logger.warning("Skipping criterion %s with unknown pillar %r", c.id, c.pillar)
                continue
            criteria.append(Criterion(id=c.id, description=c.description or c.name, pillar=pillar))
        return criteria

    async def list_assessments(
        self,
        kind: AssessmentKind,
        collaborator_ids: Optional[Sequence[str]] = None,
        cycle: Optional[str] = None,
    ) -> List[AssessmentRecord]:
        model = {
            AssessmentKind.SELF: SelfAssessment,
            AssessmentKind.MANAGER: ManagerAssessment,
            AssessmentKind.COMMITTEE: CommitteeAssessment,
            AssessmentKind.PEER_360: Assessment360,
        }[kind]
        evaluated_column = model.author_id if kind == AssessmentKind.SELF else model.evaluated_user_id

        query = select(model).where(model.status == AssessmentStatus.SUBMITTED.value)
        if collaborator_ids is not None:
            query = query.where(evaluated_column.in_(list(collaborator_ids)))
        if cycle is not None:
            query = query.where(model.cycle == cycle)

        result = await self.db.execute(query.order_by(model.cycle, model.id))
        return [self._to_record(kind, row) for row in result.scalars()]

    @staticmethod
    def _to_record(kind: AssessmentKind, row) -> AssessmentRecord:
        base = dict(
            id=str(row.id),
            kind=kind,
            cycle=row.cycle,
            author_id=row.author_id,
            status=row.status,
        )
        if kind == AssessmentKind.SELF:
            return AssessmentRecord(evaluated_user_id=row.author_id, answers=_answers(row.answers), **base)
        if kind == AssessmentKind.MANAGER:
            return AssessmentRecord(evaluated_user_id=row.evaluated_user_id, answers=_answers(row.answers), **base)
        if kind == AssessmentKind.COMMITTEE:
            return AssessmentRecord(
                evaluated_user_id=row.evaluated_user_id,
                final_score=row.final_score,
                justification=row.justification,
                **base,
            )
        return AssessmentRecord(
            evaluated_user_id=row.evaluated_user_id,
            overall_score=row.overall_score,
            **base,
        )

    async def list_collaborators(
        self,
        active_only: bool = True,
        ids: Optional[Sequence[str]] = None,
    ) -> List[Collaborator]:
        query = select(User)
        if active_only:
            query = query.where(User.is_active.is_(True))
        if ids is not None:
            query = query.where(User.id.in_(list(ids)))
        result = await self.db.execute(query.order_by(User.name))
        return [Collaborator.model_validate(u) for u in result.scalars()]

    async def get_collaborator(self, collaborator_id: str) -> Optional[Collaborator]:
        result = await self.db.execute(select(User).where(User.id == collaborator_id))
        user = result.scalar_one_or_none()
        return Collaborator.model_validate(user) if user else None


class AnalyticsSnapshot:
    """
    Everything one analytics request reads, fetched up front.

    ``collaborators`` are the collaborators in scope (active ones unless the
    caller asked otherwise); ``records`` holds every submitted assessment
    that was fetched, in scope or not.
    """

    def __init__(
        self,
        lookup: CriteriaLookup,
        collaborators: Iterable[Collaborator],
        records: Iterable[AssessmentRecord],
        directory: Optional[Iterable[Collaborator]] = None,
    ):
        self.lookup = lookup
        self.collaborators: List[Collaborator] = list(collaborators)
        self.records: List[AssessmentRecord] = [r for r in records if r.is_submitted]
        self.directory: Dict[str, Collaborator] = {c.id: c for c in (directory or [])}
        self.directory.update({c.id: c for c in self.collaborators})

        self.records_by_collaborator: Dict[str, List[AssessmentRecord]] = {}
        for record in self.records:
            self.records_by_collaborator.setdefault(record.evaluated_user_id, []).append(record)
        self._histories: Dict[str, PerformanceHistory] = {}

    def collaborator(self, collaborator_id: Optional[str]) -> Optional[Collaborator]:
        if collaborator_id is None:
            return None
        return self.directory.get(collaborator_id)

    def name_of(self, collaborator_id: Optional[str]) -> Optional[str]:
        found = self.collaborator(collaborator_id)
        return found.name if found else None

    def records_for(self, collaborator_id: str, kind: Optional[AssessmentKind] = None) -> List[AssessmentRecord]:
        records = self.records_by_collaborator.get(collaborator_id, [])
        if kind is None:
            return list(records)
        return [r for r in records if r.kind == kind]

    def history(self, collaborator_id: str) -> PerformanceHistory:
        if collaborator_id not in self._histories:
            self._histories[collaborator_id] = build_performance_history(
                collaborator_id, self.records_for(collaborator_id), self.lookup
            )
        return self._histories[collaborator_id]

    def cycles(self) -> List[str]:
        """Cycles with any submitted self, manager or committee record, oldest first."""
        return sorted({r.cycle for r in self.records if r.kind != AssessmentKind.PEER_360})

    def committee_scores(self, cycle: Optional[str]) -> List[float]:
        if cycle is None:
            return []
        return [
            r.final_score for r in self.records
            if r.kind == AssessmentKind.COMMITTEE and r.cycle == cycle and r.final_score is not None
        ]

    def latest_final_scores(self) -> Dict[str, Optional[float]]:
        """Most recent committee final score of each in-scope collaborator."""
        scores: Dict[str, Optional[float]] = {}
        for collaborator in self.collaborators:
            finals = self.history(collaborator.id).final_scores
            scores[collaborator.id] = finals[-1] if finals else None
        return scores


async def load_snapshot(
    store: AssessmentStore,
    collaborator_ids: Optional[Sequence[str]] = None,
    active_only: bool = True,
) -> AnalyticsSnapshot:
    criteria = await store.list_criteria()
    collaborators = await store.list_collaborators(active_only=active_only, ids=collaborator_ids)
    directory = await store.list_collaborators(active_only=False)

    records: List[AssessmentRecord] = []
    for kind in AssessmentKind:
        records.extend(await store.list_assessments(kind, collaborator_ids=collaborator_ids))

    logger.info(
        "Loaded analytics snapshot: %d criteria, %d collaborators, %d submitted assessments",
        len(criteria), len(collaborators), len(records),
    )
    return AnalyticsSnapshot(CriteriaLookup(criteria), collaborators, records, directory=directory)
