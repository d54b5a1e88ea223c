"""
Shared fixtures: an in-memory assessment store and a small organization.

The organization (cycles 2024.1, 2024.2, 2025.1):

- alice: Engineering / Senior / Engineer, committee 3.5, 4.0, 4.6
- bob:   Engineering / Senior / Engineer, committee 4.0, 4.0, 3.2
- carol: Sales / Junior / Analyst, committee 2.0 in 2025.1 only
- erin:  Engineering / Senior / Engineer, no submitted assessments
- dan:   inactive, committee 4.8 in 2024.1
- maria: manager of alice and bob, HR role, no assessments
"""

import asyncio
from typing import List, Optional, Sequence

import pytest

from app.schemas.assessment import (
    Answer,
    AssessmentKind,
    AssessmentRecord,
    AssessmentStatus,
    Collaborator,
    Criterion,
    Pillar,
)
from app.services.aggregation import CriteriaLookup
from app.services.store import AnalyticsSnapshot, AssessmentStore, load_snapshot


class InMemoryAssessmentStore(AssessmentStore):
    def __init__(self, criteria, collaborators, records):
        self.criteria = list(criteria)
        self.collaborators = list(collaborators)
        self.records = list(records)
        self.calls = []

    async def list_criteria(self) -> List[Criterion]:
        self.calls.append("list_criteria")
        return list(self.criteria)

    async def list_assessments(
        self,
        kind: AssessmentKind,
        collaborator_ids: Optional[Sequence[str]] = None,
        cycle: Optional[str] = None,
    ) -> List[AssessmentRecord]:
        self.calls.append(f"list_assessments:{kind.value}")
        return [
            r for r in self.records
            if r.kind == kind
            and r.status == AssessmentStatus.SUBMITTED
            and (collaborator_ids is None or r.evaluated_user_id in collaborator_ids)
            and (cycle is None or r.cycle == cycle)
        ]

    async def list_collaborators(self, active_only: bool = True, ids: Optional[Sequence[str]] = None) -> List[Collaborator]:
        self.calls.append("list_collaborators")
        found = [
            c for c in self.collaborators
            if (not active_only or c.is_active) and (ids is None or c.id in ids)
        ]
        return sorted(found, key=lambda c: c.name)

    async def get_collaborator(self, collaborator_id: str) -> Optional[Collaborator]:
        self.calls.append("get_collaborator")
        return next((c for c in self.collaborators if c.id == collaborator_id), None)


def answers(**scores) -> List[Answer]:
    return [Answer(criterion_id=criterion_id, score=score) for criterion_id, score in scores.items()]


def self_assessment(user_id, cycle, status=AssessmentStatus.SUBMITTED, **scores) -> AssessmentRecord:
    return AssessmentRecord(
        kind=AssessmentKind.SELF,
        cycle=cycle,
        author_id=user_id,
        evaluated_user_id=user_id,
        status=status,
        answers=answers(**scores),
    )


def manager_assessment(user_id, cycle, manager_id="maria", **scores) -> AssessmentRecord:
    return AssessmentRecord(
        kind=AssessmentKind.MANAGER,
        cycle=cycle,
        author_id=manager_id,
        evaluated_user_id=user_id,
        answers=answers(**scores),
    )


def committee_assessment(user_id, cycle, final_score, justification=None) -> AssessmentRecord:
    return AssessmentRecord(
        kind=AssessmentKind.COMMITTEE,
        cycle=cycle,
        author_id="committee",
        evaluated_user_id=user_id,
        final_score=final_score,
        justification=justification,
    )


def peer_assessment(user_id, cycle, overall_score, author_id="peer") -> AssessmentRecord:
    return AssessmentRecord(
        kind=AssessmentKind.PEER_360,
        cycle=cycle,
        author_id=author_id,
        evaluated_user_id=user_id,
        overall_score=overall_score,
    )


CRITERIA = [
    Criterion(id="b1", description="Collaboration", pillar=Pillar.BEHAVIOR),
    Criterion(id="b2", description="Communication", pillar=Pillar.BEHAVIOR),
    Criterion(id="e1", description="Delivery", pillar=Pillar.EXECUTION),
    Criterion(id="m1", description="People leadership", pillar=Pillar.MANAGEMENT),
]


def make_collaborators() -> List[Collaborator]:
    return [
        Collaborator(id="alice", name="Alice", job_title="Engineer", seniority="Senior",
                     business_unit="Engineering", manager_id="maria", mentor_id="bob"),
        Collaborator(id="bob", name="Bob", job_title="Engineer", seniority="Senior",
                     business_unit="Engineering", manager_id="maria"),
        Collaborator(id="carol", name="Carol", job_title="Analyst", seniority="Junior",
                     business_unit="Sales"),
        Collaborator(id="erin", name="Erin", job_title="Engineer", seniority="Senior",
                     business_unit="Engineering"),
        Collaborator(id="dan", name="Dan", job_title="Engineer", seniority="Senior",
                     business_unit="Engineering", is_active=False),
        Collaborator(id="maria", name="Maria", job_title="Manager", seniority="Lead",
                     roles=["hr"], is_active=False),
    ]


def make_records() -> List[AssessmentRecord]:
    return [
        # alice
        self_assessment("alice", "2024.1", b1=3, b2=4, e1=3, m1=3),
        self_assessment("alice", "2024.2", b1=4, b2=4, e1=4, m1=3),
        self_assessment("alice", "2025.1", b1=5, b2=4, e1=5, m1=4),
        manager_assessment("alice", "2024.1", b1=3, e1=3),
        manager_assessment("alice", "2025.1", b1=4, b2=4, e1=5, m1=5),
        committee_assessment("alice", "2024.1", 3.5),
        committee_assessment("alice", "2024.2", 4.0),
        committee_assessment("alice", "2025.1", 4.6, justification="Consistent delivery"),
        peer_assessment("alice", "2025.1", 4.2),
        # bob
        self_assessment("bob", "2024.1", b1=4, e1=4, m1=4),
        self_assessment("bob", "2025.1", b1=3, e1=3, m1=3),
        committee_assessment("bob", "2024.1", 4.0),
        committee_assessment("bob", "2024.2", 4.0),
        committee_assessment("bob", "2025.1", 3.2),
        # carol
        self_assessment("carol", "2025.1", b1=2, e1=2),
        committee_assessment("carol", "2025.1", 2.0),
        # erin only has a draft
        self_assessment("erin", "2025.1", status=AssessmentStatus.DRAFT, b1=5, e1=5),
        # dan is inactive
        committee_assessment("dan", "2024.1", 4.8),
    ]


@pytest.fixture
def lookup():
    return CriteriaLookup(CRITERIA)


@pytest.fixture
def store():
    return InMemoryAssessmentStore(CRITERIA, make_collaborators(), make_records())


@pytest.fixture
def snapshot(store) -> AnalyticsSnapshot:
    return asyncio.run(load_snapshot(store))


def build_snapshot(collaborators, records, criteria=CRITERIA) -> AnalyticsSnapshot:
    """Snapshot over hand-made data, every collaborator in scope."""
    return AnalyticsSnapshot(CriteriaLookup(criteria), collaborators, records, directory=collaborators)
