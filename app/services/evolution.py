"""
Collaborator evolution views.

Summary rows for the HR listing, the detailed per-collaborator report and the
single-pillar deep dive. Everything here is computed from an
``AnalyticsSnapshot``; nothing performs I/O.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from app.core.exceptions import CollaboratorNotFoundError
from app.schemas.assessment import (
    PILLARS,
    AssessmentKind,
    AssessmentRecord,
    Collaborator,
    PerformanceDataPoint,
    PerformanceHistory,
    Pillar,
)
from app.schemas.evolution import (
    AssessmentTypeBreakdown,
    CollaboratorDetailedEvolution,
    CollaboratorEvolutionSummary,
    CollaboratorProfile,
    CriterionEvolution,
    CycleCriterionScore,
    CycleDetail,
    EvolutionSummaryStats,
    Insight,
    PillarBenchmark,
    PillarEvolutionDetail,
    PillarPerformance,
    PillarPrediction,
    PillarSummary,
    Predictions,
)
from app.services.benchmark import (
    calculate_benchmarking,
    cohort_ranking,
    rank_in_cohort,
    same_job_title,
    same_seniority,
    top_percent_label,
)
from app.services.store import AnalyticsSnapshot
from app.services.trends import Trend, calculate_consistency_score, classify_trend
from app.utils.numbers import mean, non_null, round_to

logger = logging.getLogger(__name__)

# Performance categories (lower bound inclusive)
HIGH_PERFORMER_THRESHOLD = 4.5
SOLID_PERFORMER_THRESHOLD = 3.5
DEVELOPING_THRESHOLD = 2.5

STRENGTH_THRESHOLD = 4.0
WEAKNESS_THRESHOLD = 3.0
IMPROVEMENT_AREA_THRESHOLD = 3.5

# Naive next-cycle extrapolation: current average * 1.10 at a fixed confidence.
PREDICTION_GROWTH_FACTOR = 1.10
PREDICTION_CONFIDENCE = 70
PREDICTION_METHOD = "heuristic: current average x 1.10 (not a fitted model)"

SUMMARY_FILTERS = ("improving", "declining", "stable", "high-performers", "low-performers")
SUMMARY_SORT_KEYS = {
    "name": lambda s: s.name.lower(),
    "latestScore": lambda s: s.latest_score or 0,
    "evolution": lambda s: s.evolution_trend.percentage_change,
    "totalCycles": lambda s: s.total_cycles,
}


def categorize_performance(score: Optional[float]) -> str:
    score = score or 0
    if score >= HIGH_PERFORMER_THRESHOLD:
        return "high-performer"
    if score >= SOLID_PERFORMER_THRESHOLD:
        return "solid-performer"
    if score >= DEVELOPING_THRESHOLD:
        return "developing"
    return "critical"


def historical_average(history: PerformanceHistory) -> float:
    return round_to(mean(history.final_scores) or 0.0, 2)


def calculate_pillar_performance(data_point: Optional[PerformanceDataPoint]) -> PillarPerformance:
    """Pillar snapshot of one cycle: self score per pillar, else the manager's."""
    if data_point is None:
        return PillarPerformance()

    scores = {pillar: data_point.pillar_score(pillar) for pillar in PILLARS}
    present = [(pillar, score) for pillar, score in scores.items() if score is not None]

    best = worst = None
    if present:
        # max/min keep the first of equal scores, so ties resolve in pillar order
        best = max(present, key=lambda item: item[1])[0]
        worst = min(present, key=lambda item: item[1])[0]

    return PillarPerformance(
        behavior=scores[Pillar.BEHAVIOR],
        execution=scores[Pillar.EXECUTION],
        management=scores[Pillar.MANAGEMENT],
        best_pillar=best,
        worst_pillar=worst,
    )


def summarize_collaborator(
    collaborator: Collaborator,
    history: PerformanceHistory,
    manager_name: Optional[str] = None,
) -> Optional[CollaboratorEvolutionSummary]:
    """Summary row, or None when the collaborator has no history."""
    if not history.data_points:
        return None

    latest = history.latest
    average = historical_average(history)
    return CollaboratorEvolutionSummary(
        collaborator_id=collaborator.id,
        name=collaborator.name,
        job_title=collaborator.job_title,
        seniority=collaborator.seniority,
        business_unit=collaborator.business_unit,
        latest_score=latest.final_score,
        latest_cycle=latest.cycle,
        first_cycle=history.data_points[0].cycle,
        historical_average=average,
        total_cycles=len(history.data_points),
        evolution_trend=classify_trend(history.final_scores),
        pillar_performance=calculate_pillar_performance(latest),
        performance_category=categorize_performance(average),
        manager_name=manager_name,
    )


def apply_summary_filters(
    summaries: List[CollaboratorEvolutionSummary],
    sort_by: Optional[str] = None,
    sort_order: Optional[str] = None,
    filter_by: Optional[str] = None,
) -> List[CollaboratorEvolutionSummary]:
    filtered = list(summaries)

    if filter_by in ("improving", "declining", "stable"):
        filtered = [s for s in filtered if s.evolution_trend.trend == Trend(filter_by)]
    elif filter_by == "high-performers":
        filtered = [s for s in filtered if s.performance_category == "high-performer"]
    elif filter_by == "low-performers":
        filtered = [s for s in filtered if s.performance_category == "critical"]

    key = SUMMARY_SORT_KEYS.get(sort_by or "")
    if key is not None:
        filtered.sort(key=key, reverse=(sort_order or "desc") != "asc")

    return filtered


def build_evolution_summaries(
    snapshot: AnalyticsSnapshot,
    sort_by: Optional[str] = None,
    sort_order: Optional[str] = None,
    filter_by: Optional[str] = None,
) -> List[CollaboratorEvolutionSummary]:
    summaries = []
    for collaborator in snapshot.collaborators:
        summary = summarize_collaborator(
            collaborator,
            snapshot.history(collaborator.id),
            manager_name=snapshot.name_of(collaborator.manager_id),
        )
        if summary is not None:
            summaries.append(summary)

    logger.info("Built %d evolution summaries out of %d collaborators", len(summaries), len(snapshot.collaborators))
    return apply_summary_filters(summaries, sort_by, sort_order, filter_by)


# ==================== Cycle and criterion detail ====================

def _latest_by_cycle(records: List[AssessmentRecord]) -> Dict[str, AssessmentRecord]:
    by_cycle: Dict[str, AssessmentRecord] = {}
    for record in records:
        by_cycle[record.cycle] = record
    return by_cycle


def _answers_mean(record: Optional[AssessmentRecord]) -> Optional[float]:
    if record is None:
        return None
    return round_to(mean(a.score for a in record.answers), 2)


def build_cycle_details(snapshot: AnalyticsSnapshot, collaborator_id: str, cycles: List[str]) -> List[CycleDetail]:
    self_by_cycle = _latest_by_cycle(snapshot.records_for(collaborator_id, AssessmentKind.SELF))
    manager_by_cycle = _latest_by_cycle(snapshot.records_for(collaborator_id, AssessmentKind.MANAGER))
    committee_by_cycle = _latest_by_cycle(snapshot.records_for(collaborator_id, AssessmentKind.COMMITTEE))
    peer_records = snapshot.records_for(collaborator_id, AssessmentKind.PEER_360)

    details = []
    for cycle in cycles:
        self_record = self_by_cycle.get(cycle)
        manager_record = manager_by_cycle.get(cycle)
        committee_record = committee_by_cycle.get(cycle)
        peers = [r for r in peer_records if r.cycle == cycle]

        criteria = {
            c.id: CycleCriterionScore(id=c.id, description=c.description, pillar=c.pillar)
            for c in snapshot.lookup.criteria
        }
        for record, field in ((self_record, "self_score"), (manager_record, "manager_score")):
            for answer in record.answers if record else []:
                if answer.criterion_id in criteria:
                    setattr(criteria[answer.criterion_id], field, answer.score)

        comments = []
        for record, label in ((self_record, "Self"), (manager_record, "Manager")):
            for answer in record.answers if record else []:
                if answer.justification:
                    comments.append(f"{label}: {answer.justification}")
        if committee_record and committee_record.justification:
            comments.append(f"Committee: {committee_record.justification}")

        committee_score = round_to(committee_record.final_score, 2) if committee_record else None
        details.append(CycleDetail(
            cycle=cycle,
            self_assessment_score=_answers_mean(self_record),
            manager_assessment_score=_answers_mean(manager_record),
            committee_assessment_score=committee_score,
            peer_assessment_score=round_to(mean(r.overall_score for r in peers), 2),
            peer_assessment_count=len(peers),
            performance_category=categorize_performance(committee_score) if committee_score is not None else None,
            criteria=list(criteria.values()),
            comments=comments,
        ))
    return details


def build_criteria_evolution(
    cycle_details: List[CycleDetail],
    snapshot: AnalyticsSnapshot,
    pillar: Optional[Pillar] = None,
) -> List[CriterionEvolution]:
    """
    Per-criterion averages of each source across cycles.

    A source average covers only the cycles where that source answered the
    criterion; the combined average is the mean of the available sources.
    """
    criteria = snapshot.lookup.for_pillar(pillar) if pillar else snapshot.lookup.criteria
    evolution = []
    for criterion in criteria:
        scores = [
            score for detail in cycle_details for score in detail.criteria if score.id == criterion.id
        ]
        self_avg = round_to(mean(s.self_score for s in scores), 2)
        manager_avg = round_to(mean(s.manager_score for s in scores), 2)
        committee_avg = round_to(mean(s.committee_score for s in scores), 2)
        evolution.append(CriterionEvolution(
            id=criterion.id,
            description=criterion.description,
            pillar=criterion.pillar,
            self_average=self_avg,
            manager_average=manager_avg,
            committee_average=committee_avg,
            combined_average=round_to(mean([self_avg, manager_avg, committee_avg]), 2),
        ))
    return evolution


def generate_insights(criteria_evolution: List[CriterionEvolution]) -> List[Insight]:
    insights = []
    for criterion in criteria_evolution:
        value = criterion.combined_average
        if value is not None and value >= STRENGTH_THRESHOLD:
            insights.append(Insight(
                type="strength",
                description=f'Criterion "{criterion.description}" is a strength with a high average',
                related_criterion=criterion.id,
                value=value,
            ))
    for criterion in criteria_evolution:
        value = criterion.combined_average
        if value is not None and value <= WEAKNESS_THRESHOLD:
            insights.append(Insight(
                type="weakness",
                description=f'Criterion "{criterion.description}" needs attention and development',
                related_criterion=criterion.id,
                value=value,
            ))
    return insights


def predict_next_score(current_average: Optional[float]) -> Optional[float]:
    if current_average is None:
        return None
    return round_to(current_average * PREDICTION_GROWTH_FACTOR, 2)


def generate_predictions(criteria_evolution: List[CriterionEvolution]) -> Predictions:
    combined = [c.combined_average for c in criteria_evolution]
    improvement_areas = [
        c.description for c in criteria_evolution
        if c.combined_average is not None and c.combined_average < IMPROVEMENT_AREA_THRESHOLD
    ]
    strengths = [
        c.description for c in criteria_evolution
        if c.combined_average is not None and c.combined_average >= STRENGTH_THRESHOLD
    ]
    return Predictions(
        next_evaluation_prediction=predict_next_score(mean(combined)),
        confidence_level=PREDICTION_CONFIDENCE,
        improvement_areas=improvement_areas or ["No critical areas identified"],
        strengths=strengths or ["Balanced development"],
        method=PREDICTION_METHOD,
    )


def development_recommendations(insights: List[Insight]) -> List[str]:
    recommendations = []
    if any(i.type == "strength" for i in insights):
        recommendations.append("Keep reinforcing the identified strengths")
    if any(i.type == "weakness" for i in insights):
        recommendations.append("Focus development on the lowest scoring criteria")
    return recommendations or ["Maintain the current development plan"]


# ==================== Pillar evolution ====================

def _members_with(snapshot: AnalyticsSnapshot, collaborator: Collaborator) -> List[Collaborator]:
    """In-scope collaborators, plus ``collaborator`` when it is out of scope (e.g. inactive)."""
    members = list(snapshot.collaborators)
    if collaborator.id not in {m.id for m in members}:
        members.append(collaborator)
    return members


def _pillar_cycle_average(detail: CycleDetail, pillar: Pillar, source: Optional[str] = None) -> Optional[float]:
    scores = [c for c in detail.criteria if c.pillar == pillar]
    if source is None:
        return round_to(mean(c.preferred_score for c in scores), 2)
    return round_to(mean(getattr(c, source) for c in scores), 2)


def calculate_pillar_benchmark(
    snapshot: AnalyticsSnapshot,
    collaborator: Collaborator,
    pillar: Pillar,
) -> PillarBenchmark:
    """Standing on ``pillar`` using each collaborator's latest pillar score."""
    members = _members_with(snapshot, collaborator)
    scores: Dict[str, Optional[float]] = {}
    for member in members:
        latest = snapshot.history(member.id).latest
        scores[member.id] = latest.pillar_score(pillar) if latest else None
    own = scores.get(collaborator.id)

    org_average = mean(scores.values())
    org_ranking = rank_in_cohort(own, scores.values())

    return PillarBenchmark(
        vs_organization_average=round_to(own - org_average, 2) if own is not None and org_average is not None else None,
        percentile_rank=org_ranking.percentile,
        seniority_ranking=top_percent_label(cohort_ranking(collaborator, members, scores, same_seniority)),
        role_ranking=top_percent_label(cohort_ranking(collaborator, members, scores, same_job_title)),
    )


def build_pillar_evolution(
    snapshot: AnalyticsSnapshot,
    collaborator: Collaborator,
    pillar: Pillar,
    cycle_details: List[CycleDetail],
) -> PillarEvolutionDetail:
    criteria = build_criteria_evolution(cycle_details, snapshot, pillar)
    average = round_to(mean(c.combined_average for c in criteria), 2)

    historical_data = {d.cycle: _pillar_cycle_average(d, pillar) for d in cycle_details}
    breakdown = {}
    for detail in cycle_details:
        self_avg = _pillar_cycle_average(detail, pillar, "self_score")
        manager_avg = _pillar_cycle_average(detail, pillar, "manager_score")
        breakdown[detail.cycle] = AssessmentTypeBreakdown(
            self_assessment=self_avg,
            manager_assessment=manager_avg,
            committee_final=detail.committee_assessment_score,
            self_vs_manager_gap=round_to(self_avg - manager_avg, 2)
            if self_avg is not None and manager_avg is not None else None,
        )

    scores = non_null(historical_data.values())
    trend = classify_trend(scores)
    summary = PillarSummary(
        current_average=scores[-1] if scores else None,
        historical_average=round_to(mean(scores), 2),
        best_score=max(scores) if scores else None,
        worst_score=min(scores) if scores else None,
        total_cycles=len(scores),
        overall_trend=trend.trend,
        total_variation=round_to(max(scores) - min(scores), 2) if scores else 0.0,
        consistency_score=calculate_consistency_score(scores),
    )

    insights = generate_insights(criteria)
    return PillarEvolutionDetail(
        collaborator_id=collaborator.id,
        pillar=pillar,
        average=average,
        trend=trend,
        criteria=criteria,
        summary=summary,
        historical_data=historical_data,
        assessment_type_breakdown=breakdown,
        benchmark=calculate_pillar_benchmark(snapshot, collaborator, pillar),
        insights=insights,
        development_recommendations=development_recommendations(insights),
        prediction=PillarPrediction(
            expected_score=predict_next_score(average),
            confidence_level=PREDICTION_CONFIDENCE,
            key_factors=["Evolution history", "Team average"],
            method=PREDICTION_METHOD,
        ),
        analyzed_at=datetime.now(timezone.utc).isoformat(),
    )


def _collaborator_with_history(snapshot: AnalyticsSnapshot, collaborator_id: str):
    collaborator = snapshot.collaborator(collaborator_id)
    if collaborator is None:
        raise CollaboratorNotFoundError(collaborator_id)
    history = snapshot.history(collaborator_id)
    if not history.data_points:
        raise CollaboratorNotFoundError(collaborator_id, "Collaborator has no evaluation history")
    return collaborator, history


def build_pillar_deep_dive(snapshot: AnalyticsSnapshot, collaborator_id: str, pillar: Pillar) -> PillarEvolutionDetail:
    collaborator, history = _collaborator_with_history(snapshot, collaborator_id)
    cycle_details = build_cycle_details(snapshot, collaborator_id, history.cycles)
    return build_pillar_evolution(snapshot, collaborator, Pillar(pillar), cycle_details)


def build_detailed_evolution(snapshot: AnalyticsSnapshot, collaborator_id: str) -> Optional[CollaboratorDetailedEvolution]:
    """Full evolution report, or None for unknown collaborators and those without history."""
    try:
        collaborator, history = _collaborator_with_history(snapshot, collaborator_id)
    except CollaboratorNotFoundError as e:
        logger.info("No detailed evolution for %s: %s", collaborator_id, e.reason)
        return None

    cycle_details = build_cycle_details(snapshot, collaborator_id, history.cycles)
    criteria_evolution = build_criteria_evolution(cycle_details, snapshot)
    pillar_evolution = [
        build_pillar_evolution(snapshot, collaborator, pillar, cycle_details) for pillar in PILLARS
        if snapshot.lookup.for_pillar(pillar)
    ]

    final_scores = history.final_scores
    insights = generate_insights(criteria_evolution)

    return CollaboratorDetailedEvolution(
        collaborator=CollaboratorProfile(
            id=collaborator.id,
            name=collaborator.name,
            email=collaborator.email,
            job_title=collaborator.job_title,
            seniority=collaborator.seniority,
            business_unit=collaborator.business_unit,
            career_track=collaborator.career_track or "",
            manager_name=snapshot.name_of(collaborator.manager_id),
            mentor_name=snapshot.name_of(collaborator.mentor_id),
        ),
        summary=EvolutionSummaryStats(
            total_cycles=len(cycle_details),
            best_score=max(final_scores) if final_scores else None,
            worst_score=min(final_scores) if final_scores else None,
            historical_average=historical_average(history),
            overall_trend=classify_trend(final_scores).trend,
            consistency_score=calculate_consistency_score(final_scores),
        ),
        cycle_details=cycle_details,
        pillar_evolution=pillar_evolution,
        criteria_evolution=criteria_evolution,
        insights=[insight.description for insight in insights],
        benchmarking=calculate_benchmarking(
            collaborator,
            _members_with(snapshot, collaborator),
            {**snapshot.latest_final_scores(), collaborator.id: final_scores[-1] if final_scores else None},
        ),
        predictions=generate_predictions(criteria_evolution),
    )
