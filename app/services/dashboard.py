"""
Organization-wide rollups: the HR dashboard and organizational trends.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from app.schemas.assessment import PILLARS, Collaborator, PerformanceDataPoint, Pillar
from app.schemas.dashboard import (
    DistributionPercentages,
    ExecutiveSummary,
    GroupTrend,
    Highlight,
    HRDashboard,
    OrganizationalTrends,
    OrganizationStats,
    PerformanceDistribution,
    TrendAnalysis,
    TrendPeriod,
)
from app.services.evolution import categorize_performance
from app.services.store import AnalyticsSnapshot
from app.services.trends import Trend, classify_trend
from app.utils.numbers import mean, percentage_change, round_to

logger = logging.getLogger(__name__)

MOVER_THRESHOLD_PERCENT = 15.0
MAX_MOVERS = 3
ORG_HIGHLIGHT_THRESHOLD_PERCENT = 2.0
ORG_HIGH_PRIORITY_THRESHOLD_PERCENT = 5.0

DISTRIBUTION_BUCKETS = {
    "high-performer": "high_performers",
    "solid-performer": "solid_performers",
    "developing": "developing",
    "critical": "critical",
}


def resolve_cycles(cycles: Sequence[str], cycle: Optional[str] = None) -> Tuple[Optional[str], Optional[str]]:
    """(current, previous) cycle; ``cycle`` pins the current one."""
    if cycle is None:
        current = cycles[-1] if cycles else None
    else:
        current = cycle
    earlier = [c for c in cycles if current is not None and c < current]
    return current, earlier[-1] if earlier else None


def data_points_until(snapshot: AnalyticsSnapshot, collaborator_id: str, cycle: Optional[str]) -> List[PerformanceDataPoint]:
    points = snapshot.history(collaborator_id).data_points
    if cycle is None:
        return list(points)
    return [p for p in points if p.cycle <= cycle]


def calculate_distribution(scores: Sequence[float]) -> PerformanceDistribution:
    counts = {field: 0 for field in DISTRIBUTION_BUCKETS.values()}
    for score in scores:
        counts[DISTRIBUTION_BUCKETS[categorize_performance(score)]] += 1

    total = len(scores)
    percentages = DistributionPercentages(**{
        field: round_to(count / total * 100, 1) if total else 0.0
        for field, count in counts.items()
    })
    return PerformanceDistribution(percentages=percentages, **counts)


def analyze_pillar_growth(histories: List[List[PerformanceDataPoint]]) -> Dict[Pillar, Optional[float]]:
    """
    Average first-vs-last growth (%) of each pillar across collaborators.

    Uses each collaborator's first and last data point; a pillar counts for a
    collaborator only when both ends have a score.
    """
    growth: Dict[Pillar, List[float]] = {pillar: [] for pillar in PILLARS}
    for points in histories:
        if len(points) < 2:
            continue
        first, last = points[0], points[-1]
        for pillar in PILLARS:
            start, end = first.pillar_score(pillar), last.pillar_score(pillar)
            if start and end is not None:
                growth[pillar].append(percentage_change(start, end))
    return {pillar: round_to(mean(values), 2) for pillar, values in growth.items()}


def analyze_trends(snapshot: AnalyticsSnapshot, cycle: Optional[str] = None) -> TrendAnalysis:
    counts = {trend: 0 for trend in Trend}
    histories = []
    for collaborator in snapshot.collaborators:
        points = data_points_until(snapshot, collaborator.id, cycle)
        histories.append(points)
        finals = [p.final_score for p in points if p.final_score is not None]
        if len(finals) < 2:
            continue
        counts[classify_trend(finals).trend] += 1

    pillar_growth = analyze_pillar_growth(histories)
    measured = [(pillar, value) for pillar, value in pillar_growth.items() if value is not None]
    fastest = max(measured, key=lambda item: item[1])[0] if measured else None
    attention = min(measured, key=lambda item: item[1])[0] if measured else None

    return TrendAnalysis(
        improving=counts[Trend.IMPROVING],
        declining=counts[Trend.DECLINING],
        stable=counts[Trend.STABLE],
        fastest_growing_pillar=fastest,
        pillar_needing_attention=attention,
        pillar_growth=pillar_growth,
    )


def _movers_description(movers: List[Tuple[Collaborator, float]]) -> str:
    return ", ".join(f"{c.name} ({change:.1f}%)" for c, change in movers)


def generate_highlights(
    snapshot: AnalyticsSnapshot,
    current_average: Optional[float],
    previous_average: Optional[float],
    cycle: Optional[str] = None,
) -> List[Highlight]:
    changes: List[Tuple[Collaborator, float]] = []
    for collaborator in snapshot.collaborators:
        finals = [p.final_score for p in data_points_until(snapshot, collaborator.id, cycle) if p.final_score is not None]
        if len(finals) < 2:
            continue
        changes.append((collaborator, percentage_change(finals[0], finals[-1])))

    highlights = []

    top = sorted((c for c in changes if c[1] > MOVER_THRESHOLD_PERCENT), key=lambda c: -c[1])[:MAX_MOVERS]
    if top:
        highlights.append(Highlight(
            type="achievement",
            title="Top performers in evolution",
            description=f"{len(top)} collaborators stood out with exceptional growth: {_movers_description(top)}",
            value=round_to(top[0][1], 2),
            priority="high",
        ))

    bottom = sorted((c for c in changes if c[1] < -MOVER_THRESHOLD_PERCENT), key=lambda c: c[1])[:MAX_MOVERS]
    if bottom:
        highlights.append(Highlight(
            type="concern",
            title="Collaborators with significant decline",
            description=f"{len(bottom)} collaborators showed a worrying decline: {_movers_description(bottom)}",
            value=round_to(bottom[0][1], 2),
            priority="high",
        ))

    if current_average and previous_average:
        growth = percentage_change(previous_average, current_average)
        if abs(growth) > ORG_HIGHLIGHT_THRESHOLD_PERCENT:
            word = "growth" if growth > 0 else "decline"
            highlights.append(Highlight(
                type="achievement" if growth > 0 else "concern",
                title=f"Organizational {word}",
                description=f"The organization recorded a {word} of {abs(growth):.1f}% in the overall average.",
                value=round_to(growth, 1),
                priority="high" if abs(growth) > ORG_HIGH_PRIORITY_THRESHOLD_PERCENT else "medium",
            ))

    return highlights


def build_dashboard(snapshot: AnalyticsSnapshot, cycle: Optional[str] = None) -> HRDashboard:
    current_cycle, previous_cycle = resolve_cycles(snapshot.cycles(), cycle)

    current_scores = snapshot.committee_scores(current_cycle)
    current_average = mean(current_scores)
    previous_average = mean(snapshot.committee_scores(previous_cycle))

    growth = 0.0
    if current_average and previous_average:
        growth = percentage_change(previous_average, current_average)

    logger.info(
        "Dashboard for cycle %s (previous %s): %d final scores, %d active collaborators",
        current_cycle, previous_cycle, len(current_scores), len(snapshot.collaborators),
    )
    return HRDashboard(
        organization_stats=OrganizationStats(
            total_collaborators=len(snapshot.collaborators),
            collaborators_with_history=len(current_scores),
            current_cycle=current_cycle,
            previous_cycle=previous_cycle,
            current_overall_average=round_to(current_average or 0.0, 2),
            previous_overall_average=round_to(previous_average, 2),
            organization_growth_percentage=round_to(growth, 2),
        ),
        performance_distribution=calculate_distribution(current_scores),
        trend_analysis=analyze_trends(snapshot, current_cycle if cycle else None),
        highlights=generate_highlights(snapshot, current_average, previous_average, current_cycle if cycle else None),
        last_updated=datetime.now(timezone.utc).isoformat(),
    )


# ==================== Organizational trends ====================

def _group_trend(key: str, members: int, averages: Dict[str, Optional[float]]) -> GroupTrend:
    present = {cycle: round_to(value, 2) for cycle, value in averages.items() if value is not None}
    return GroupTrend(
        key=key,
        collaborators=members,
        averages_by_cycle=present,
        trend=classify_trend(list(present.values())),
    )


def _grouped_trends(
    snapshot: AnalyticsSnapshot,
    cycles: List[str],
    group_of: Callable[[Collaborator], Optional[str]],
) -> List[GroupTrend]:
    groups: Dict[str, List[Collaborator]] = {}
    for collaborator in snapshot.collaborators:
        key = group_of(collaborator)
        if key:
            groups.setdefault(key, []).append(collaborator)

    trends = []
    for key in sorted(groups):
        members = groups[key]
        averages = {}
        for cycle in cycles:
            scores = []
            for member in members:
                point = next((p for p in snapshot.history(member.id).data_points if p.cycle == cycle), None)
                if point is not None:
                    scores.append(point.final_score)
            averages[cycle] = mean(scores)
        trends.append(_group_trend(key, len(members), averages))
    return trends


def build_organizational_trends(
    snapshot: AnalyticsSnapshot,
    start_cycle: Optional[str] = None,
    end_cycle: Optional[str] = None,
) -> OrganizationalTrends:
    all_cycles = snapshot.cycles()
    start = start_cycle or (all_cycles[0] if all_cycles else None)
    end = end_cycle or (all_cycles[-1] if all_cycles else None)
    cycles = [c for c in all_cycles if (start is None or c >= start) and (end is None or c <= end)]

    organization = _group_trend(
        "organization",
        len(snapshot.collaborators),
        {cycle: mean(snapshot.committee_scores(cycle)) for cycle in cycles},
    )

    pillar_trends = []
    for pillar in PILLARS:
        averages = {}
        for cycle in cycles:
            scores = []
            for collaborator in snapshot.collaborators:
                point = next((p for p in snapshot.history(collaborator.id).data_points if p.cycle == cycle), None)
                if point is not None:
                    scores.append(point.pillar_score(pillar))
            averages[cycle] = mean(scores)
        pillar_trends.append(_group_trend(pillar.value, len(snapshot.collaborators), averages))

    business_unit_trends = _grouped_trends(snapshot, cycles, lambda c: c.business_unit)
    seniority_trends = _grouped_trends(snapshot, cycles, lambda c: c.seniority)

    key_findings = []
    if len(organization.averages_by_cycle) >= 2:
        key_findings.append(
            f"Organization average is {organization.trend.trend.value} "
            f"({organization.trend.percentage_change:+.2f}%) between {start} and {end}"
        )
    concern_areas = []
    for group in pillar_trends + business_unit_trends + seniority_trends:
        if group.trend.trend == Trend.IMPROVING:
            key_findings.append(f"{group.key} improved by {group.trend.percentage_change:.2f}%")
        elif group.trend.trend == Trend.DECLINING:
            concern_areas.append(f"{group.key} declined by {abs(group.trend.percentage_change):.2f}%")

    logger.info(
        "Organizational trends %s..%s: %d cycles, %d business units, %d seniority levels",
        start, end, len(cycles), len(business_unit_trends), len(seniority_trends),
    )
    return OrganizationalTrends(
        period=TrendPeriod(start_cycle=start, end_cycle=end, total_cycles=len(cycles)),
        organization_averages_by_cycle=organization.averages_by_cycle,
        pillar_trends=pillar_trends,
        business_unit_trends=business_unit_trends,
        seniority_trends=seniority_trends,
        executive_summary=ExecutiveSummary(
            overall_trend=organization.trend.trend,
            key_findings=key_findings,
            concern_areas=concern_areas,
        ),
        analyzed_at=datetime.now(timezone.utc).isoformat(),
    )
