"""
Cross-collaborator comparison over shared cycles.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from app.core.exceptions import InvalidComparisonError, InvalidPillarError
from app.schemas.assessment import PILLARS, PerformanceHistory, Pillar
from app.schemas.comparison import (
    CollaboratorComparisonData,
    ComparedCollaborator,
    ComparisonInsight,
    ComparisonStats,
    ComparisonSummary,
    EvolutionComparison,
)
from app.services.store import AnalyticsSnapshot
from app.services.trends import Trend, calculate_consistency_score, classify_trend, growth_rate
from app.utils.numbers import mean, non_null, population_std, round_to

logger = logging.getLogger(__name__)

MIN_COMPARED = 2
MAX_COMPARED = 5

# Pooled max-min spread above which calibration is recommended.
WIDE_SPREAD_THRESHOLD = 1.0


def validate_collaborator_ids(collaborator_ids: Sequence[str]) -> List[str]:
    """Deduplicated ids, rejecting fewer than 2 or more than 5."""
    ids = list(dict.fromkeys(i.strip() for i in collaborator_ids if i and i.strip()))
    if len(ids) < MIN_COMPARED:
        raise InvalidComparisonError(f"At least {MIN_COMPARED} collaborators are required for a comparison")
    if len(ids) > MAX_COMPARED:
        raise InvalidComparisonError(f"At most {MAX_COMPARED} collaborators can be compared")
    return ids


def parse_pillar(pillar: Optional[str]) -> Optional[Pillar]:
    """``None``/``overall`` mean the final score; otherwise one of the pillars."""
    if pillar is None or pillar.strip().lower() in ("", "overall"):
        return None
    try:
        return Pillar(pillar.strip().upper())
    except ValueError:
        raise InvalidPillarError(f"Unknown pillar: {pillar}")


def _series(history: PerformanceHistory, cycles: Sequence[str], pillar: Optional[Pillar]) -> Dict[str, Optional[float]]:
    wanted = set(cycles)
    return {
        point.cycle: point.final_score if pillar is None else point.pillar_score(pillar)
        for point in history.data_points
        if point.cycle in wanted
    }


def calculate_comparison_stats(scores: List[float]) -> ComparisonStats:
    return ComparisonStats(
        average=round_to(mean(scores) or 0.0, 2),
        trend=classify_trend(scores).trend,
        total_cycles=len(scores),
        growth_rate=growth_rate(scores),
        consistency=calculate_consistency_score(scores),
    )


def generate_comparison_insights(data: List[CollaboratorComparisonData]) -> List[ComparisonInsight]:
    """
    ``leader`` is the highest average; ``most_improved`` the highest positive
    growth rate. Ties go to the collaborator listed first.
    """
    if not data:
        return []
    insights = []

    leader = data[0]
    for current in data[1:]:
        if current.stats.average > leader.stats.average:
            leader = current
    insights.append(ComparisonInsight(
        type="leader",
        collaborator_id=leader.collaborator.id,
        collaborator_name=leader.collaborator.name,
        description=f"Best average performance in the group ({leader.stats.average})",
        value=leader.stats.average,
    ))

    most_improved = data[0]
    for current in data[1:]:
        if current.stats.growth_rate > most_improved.stats.growth_rate:
            most_improved = current
    if most_improved.stats.growth_rate > 0:
        insights.append(ComparisonInsight(
            type="most_improved",
            collaborator_id=most_improved.collaborator.id,
            collaborator_name=most_improved.collaborator.name,
            description=f"Highest growth in the period ({most_improved.stats.growth_rate}%)",
            value=most_improved.stats.growth_rate,
        ))

    return insights


def comparison_recommendations(data: List[CollaboratorComparisonData], max_difference: float) -> List[str]:
    recommendations = [
        f"Plan a development follow-up with {d.collaborator.name}, whose scores are declining"
        for d in data if d.stats.trend == Trend.DECLINING
    ]
    if max_difference > WIDE_SPREAD_THRESHOLD:
        recommendations.append("Review calibration: scores in the group differ by more than one point")
    return recommendations


def compare_collaborators(
    snapshot: AnalyticsSnapshot,
    collaborator_ids: Sequence[str],
    cycles: Optional[Sequence[str]] = None,
    pillar: Optional[str] = None,
) -> EvolutionComparison:
    ids = validate_collaborator_ids(collaborator_ids)
    pillar_focus = parse_pillar(pillar)

    collaborators = [snapshot.collaborator(i) for i in ids]
    missing = [i for i, c in zip(ids, collaborators) if c is None]
    if missing:
        logger.warning("Comparison skipping unknown collaborators: %s", ", ".join(missing))
    collaborators = [c for c in collaborators if c is not None]
    if len(collaborators) < MIN_COMPARED:
        raise InvalidComparisonError(
            f"At least {MIN_COMPARED} known collaborators are required for a comparison"
        )

    all_cycles = sorted(set(cycles)) if cycles else snapshot.cycles()

    data = []
    for collaborator in collaborators:
        history = snapshot.history(collaborator.id)
        historical_data = _series(history, all_cycles, pillar_focus)
        pillar_data = None
        if pillar_focus is None:
            pillar_data = {p: _series(history, all_cycles, p) for p in PILLARS}

        data.append(CollaboratorComparisonData(
            collaborator=ComparedCollaborator(
                id=collaborator.id,
                name=collaborator.name,
                job_title=collaborator.job_title,
                seniority=collaborator.seniority,
                business_unit=collaborator.business_unit,
            ),
            historical_data=historical_data,
            pillar_data=pillar_data,
            stats=calculate_comparison_stats(non_null(historical_data.values())),
        ))

    group_averages_by_cycle = {}
    for cycle in all_cycles:
        cycle_average = mean(d.historical_data.get(cycle) for d in data)
        if cycle_average is not None:
            group_averages_by_cycle[cycle] = round_to(cycle_average, 2)

    all_scores = [score for d in data for score in non_null(d.historical_data.values())]
    max_difference = round_to(max(all_scores) - min(all_scores), 2) if all_scores else 0.0

    insights = generate_comparison_insights(data)
    by_type = {i.type: i.collaborator_name for i in insights}

    logger.info("Compared %d collaborators over %d cycles", len(data), len(all_cycles))
    return EvolutionComparison(
        summary=ComparisonSummary(
            total_collaborators=len(data),
            cycles_included=all_cycles,
            pillar_focus=pillar_focus,
            group_average=round_to(mean(all_scores) or 0.0, 2),
            group_standard_deviation=round_to(population_std(all_scores), 2),
            max_difference=max_difference,
            top_performer=by_type.get("leader"),
            most_improved=by_type.get("most_improved"),
        ),
        collaborators=data,
        insights=insights,
        group_averages_by_cycle=group_averages_by_cycle,
        recommendations=comparison_recommendations(data, max_difference),
        analyzed_at=datetime.now(timezone.utc).isoformat(),
    )
