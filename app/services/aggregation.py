"""
Pillar score aggregation.

Turns criterion-level answers into per-cycle pillar means and assembles the
per-collaborator performance history every analytics view is built from.
"""

import logging
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional

from app.schemas.assessment import (
    PILLARS,
    AssessmentKind,
    AssessmentRecord,
    Criterion,
    PerformanceDataPoint,
    PerformanceHistory,
    Pillar,
    PillarScores,
)
from app.utils.numbers import round_to

logger = logging.getLogger(__name__)


class CriteriaLookup:
    """
    Read-only criterion reference data.

    Built once per request from the store's criteria listing and handed to
    the aggregator; a refresh means building a new lookup.
    """

    def __init__(self, criteria: Iterable[Criterion]):
        by_id = {c.id: c for c in criteria}
        self._criteria: Mapping[str, Criterion] = MappingProxyType(by_id)
        self._pillars: Mapping[str, Pillar] = MappingProxyType({c.id: c.pillar for c in by_id.values()})

    def __len__(self) -> int:
        return len(self._criteria)

    def __contains__(self, criterion_id: str) -> bool:
        return criterion_id in self._criteria

    def pillar_of(self, criterion_id: str) -> Optional[Pillar]:
        return self._pillars.get(criterion_id)

    def get(self, criterion_id: str) -> Optional[Criterion]:
        return self._criteria.get(criterion_id)

    @property
    def criteria(self) -> List[Criterion]:
        return list(self._criteria.values())

    def for_pillar(self, pillar: Pillar) -> List[Criterion]:
        return [c for c in self._criteria.values() if c.pillar == pillar]


def calculate_pillar_scores(
    assessments: Iterable[AssessmentRecord],
    lookup: CriteriaLookup,
) -> Dict[str, PillarScores]:
    """
    Per-cycle pillar means for one assessment source.

    A pillar's score is the mean of its answers rounded to 2 decimals, or
    None when no answer maps to it. Answers whose criterion is not in the
    lookup are skipped. A later assessment for the same cycle overwrites an
    earlier one.
    """
    scores_by_cycle: Dict[str, PillarScores] = {}

    for assessment in assessments:
        totals = {pillar: [0.0, 0] for pillar in PILLARS}

        for answer in assessment.answers:
            pillar = lookup.pillar_of(answer.criterion_id)
            if pillar is None:
                logger.debug(
                    "Skipping answer for unknown criterion %s in cycle %s",
                    answer.criterion_id, assessment.cycle,
                )
                continue
            totals[pillar][0] += answer.score
            totals[pillar][1] += 1

        scores_by_cycle[assessment.cycle] = PillarScores(**{
            pillar.value: round_to(total / count, 2) if count else None
            for pillar, (total, count) in totals.items()
        })

    return scores_by_cycle


def build_performance_history(
    collaborator_id: str,
    records: Iterable[AssessmentRecord],
    lookup: CriteriaLookup,
) -> PerformanceHistory:
    """
    Chronological data points for one collaborator.

    Only SUBMITTED records count. A cycle gets a data point when at least one
    self, manager or committee record exists for it.
    """
    by_kind: Dict[AssessmentKind, List[AssessmentRecord]] = {kind: [] for kind in AssessmentKind}
    for record in records:
        if record.is_submitted:
            by_kind[record.kind].append(record)

    self_scores = calculate_pillar_scores(by_kind[AssessmentKind.SELF], lookup)
    manager_scores = calculate_pillar_scores(by_kind[AssessmentKind.MANAGER], lookup)
    final_scores = {
        record.cycle: round_to(record.final_score, 2)
        for record in by_kind[AssessmentKind.COMMITTEE]
        if record.final_score is not None
    }

    cycles = sorted(set(self_scores) | set(manager_scores) | set(final_scores))
    data_points = [
        PerformanceDataPoint(
            cycle=cycle,
            self_score=self_scores.get(cycle) or PillarScores(),
            manager_score=manager_scores.get(cycle) or PillarScores(),
            final_score=final_scores.get(cycle),
        )
        for cycle in cycles
    ]

    return PerformanceHistory(
        collaborator_id=collaborator_id,
        data_points=data_points,
        assessments_submitted_count=len(by_kind[AssessmentKind.SELF]) + len(by_kind[AssessmentKind.PEER_360]),
    )
