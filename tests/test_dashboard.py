"""
Tests for the HR dashboard and organizational trends.
"""

import pytest
from hypothesis import given, strategies as st

from app.schemas.assessment import Collaborator, Pillar
from app.services.dashboard import (
    build_dashboard,
    MAX_MOVERS,
    MOVER_THRESHOLD_PERCENT,
    ORG_HIGH_PRIORITY_THRESHOLD_PERCENT,
    ORG_HIGHLIGHT_THRESHOLD_PERCENT,
    build_organizational_trends,
    calculate_distribution,
    generate_highlights,
    resolve_cycles,
)
from app.services.trends import Trend

from conftest import build_snapshot, committee_assessment


class TestResolveCycles:

    def test_latest_cycle_by_default(self):
        assert resolve_cycles(["2024.1", "2024.2", "2025.1"]) == ("2025.1", "2024.2")

    def test_pinned_cycle(self):
        assert resolve_cycles(["2024.1", "2024.2", "2025.1"], "2024.2") == ("2024.2", "2024.1")
        assert resolve_cycles(["2024.1"], "2024.1") == ("2024.1", None)

    def test_no_cycles(self):
        assert resolve_cycles([]) == (None, None)


class TestPerformanceDistribution:

    def test_bucket_boundaries(self):
        distribution = calculate_distribution([4.5, 4.49, 3.5, 3.49, 2.5, 2.49])

        assert (distribution.high_performers, distribution.solid_performers) == (1, 2)
        assert (distribution.developing, distribution.critical) == (2, 1)
        assert distribution.percentages.solid_performers == 33.3

    def test_empty(self):
        distribution = calculate_distribution([])

        assert distribution.total == 0
        assert distribution.percentages.high_performers == 0.0

    @given(st.lists(st.floats(min_value=0.0, max_value=5.0, allow_nan=False), max_size=50))
    def test_counts_sum_to_scores(self, scores):
        distribution = calculate_distribution(scores)

        assert distribution.total == len(scores)
        if scores:
            percentages = distribution.percentages
            total = percentages.high_performers + percentages.solid_performers + percentages.developing + percentages.critical
            assert total == pytest.approx(100, abs=0.25)


class TestDashboard:

    def test_organization_stats(self, snapshot):
        stats = build_dashboard(snapshot).organization_stats

        assert stats.total_collaborators == 4
        assert stats.collaborators_with_history == 3
        assert (stats.current_cycle, stats.previous_cycle) == ("2025.1", "2024.2")
        assert stats.current_overall_average == 3.27
        assert stats.previous_overall_average == 4.0
        assert stats.organization_growth_percentage == -18.33

    def test_distribution_counts_final_scores_of_the_cycle(self, snapshot):
        dashboard = build_dashboard(snapshot)
        distribution = dashboard.performance_distribution

        assert distribution.total == len(snapshot.committee_scores("2025.1")) == 3
        assert (distribution.high_performers, distribution.solid_performers) == (1, 0)
        assert (distribution.developing, distribution.critical) == (1, 1)

    def test_trend_analysis(self, snapshot):
        analysis = build_dashboard(snapshot).trend_analysis

        assert (analysis.improving, analysis.declining, analysis.stable) == (1, 1, 0)
        assert analysis.pillar_growth == {
            Pillar.BEHAVIOR: 1.79,
            Pillar.EXECUTION: 20.83,
            Pillar.MANAGEMENT: 4.17,
        }
        assert analysis.fastest_growing_pillar == Pillar.EXECUTION
        assert analysis.pillar_needing_attention == Pillar.BEHAVIOR

    def test_highlights(self, snapshot):
        highlights = build_dashboard(snapshot).highlights

        assert [(h.type, h.priority) for h in highlights] == [
            ("achievement", "high"),
            ("concern", "high"),
            ("concern", "high"),
        ]
        assert "Alice (31.4%)" in highlights[0].description
        assert highlights[0].value == 31.43
        assert "Bob (-20.0%)" in highlights[1].description
        assert highlights[2].title == "Organizational decline"
        assert highlights[2].value == -18.3

    def test_as_of_cycle(self, snapshot):
        dashboard = build_dashboard(snapshot, cycle="2024.2")
        stats = dashboard.organization_stats

        assert (stats.current_cycle, stats.previous_cycle) == ("2024.2", "2024.1")
        assert stats.current_overall_average == 4.0
        assert stats.previous_overall_average == 4.1
        assert stats.organization_growth_percentage == -2.44
        assert (dashboard.trend_analysis.improving, dashboard.trend_analysis.stable) == (1, 1)
        assert [(h.type, h.priority) for h in dashboard.highlights] == [("concern", "medium")]

    def test_cycle_without_final_scores(self, snapshot):
        dashboard = build_dashboard(snapshot, cycle="2030.1")

        assert dashboard.organization_stats.current_overall_average == 0.0
        assert dashboard.organization_stats.organization_growth_percentage == 0.0
        assert dashboard.performance_distribution.total == 0

    def test_empty_organization(self):
        dashboard = build_dashboard(build_snapshot([], []))

        assert dashboard.organization_stats.current_cycle is None
        assert dashboard.organization_stats.total_collaborators == 0
        assert dashboard.trend_analysis.fastest_growing_pillar is None
        assert dashboard.highlights == []


class TestOrganizationalTrends:

    def test_full_period(self, snapshot):
        trends = build_organizational_trends(snapshot)

        assert (trends.period.start_cycle, trends.period.end_cycle, trends.period.total_cycles) == ("2024.1", "2025.1", 3)
        assert trends.organization_averages_by_cycle == {"2024.1": 4.1, "2024.2": 4.0, "2025.1": 3.27}
        assert trends.executive_summary.overall_trend == Trend.DECLINING
        assert trends.executive_summary.key_findings[0].startswith("Organization average is declining")

    def test_group_trends(self, snapshot):
        trends = build_organizational_trends(snapshot)
        units = {g.key: g for g in trends.business_unit_trends}

        assert list(units) == ["Engineering", "Sales"]
        assert units["Engineering"].collaborators == 3
        assert units["Engineering"].averages_by_cycle == {"2024.1": 3.75, "2024.2": 4.0, "2025.1": 3.9}
        assert units["Engineering"].trend.trend == Trend.STABLE
        assert units["Sales"].averages_by_cycle == {"2025.1": 2.0}
        assert [g.key for g in trends.pillar_trends] == ["BEHAVIOR", "EXECUTION", "MANAGEMENT"]
        assert any(area.startswith("BEHAVIOR declined") for area in trends.executive_summary.concern_areas)

    def test_cycle_range(self, snapshot):
        trends = build_organizational_trends(snapshot, start_cycle="2024.2")

        assert trends.period.total_cycles == 2
        assert list(trends.organization_averages_by_cycle) == ["2024.2", "2025.1"]


def movers_snapshot(finals):
    """One collaborator per entry of ``finals`` (name -> (first, last) committee score)."""
    people = [Collaborator(id=name.lower(), name=name) for name in finals]
    records = []
    for person, (first, last) in zip(people, finals.values()):
        records.append(committee_assessment(person.id, "2024.1", first))
        records.append(committee_assessment(person.id, "2024.2", last))
    return build_snapshot(people, records)


class TestHighlightThresholds:

    def test_threshold_constants(self):
        assert MOVER_THRESHOLD_PERCENT == 15.0
        assert MAX_MOVERS == 3
        assert ORG_HIGHLIGHT_THRESHOLD_PERCENT == 2.0
        assert ORG_HIGH_PRIORITY_THRESHOLD_PERCENT == 5.0

    def test_exactly_fifteen_percent_is_not_a_mover(self):
        # 5.0 -> 5.75 is +15% and 5.0 -> 4.25 is -15%
        snapshot = movers_snapshot({"Up": (5.0, 5.75), "Down": (5.0, 4.25), "Riser": (5.0, 5.8)})

        highlights = generate_highlights(snapshot, None, None)

        assert [h.type for h in highlights] == ["achievement"]
        assert highlights[0].description.endswith("Riser (16.0%)")

    def test_movers_are_capped(self):
        snapshot = movers_snapshot({"A": (2.0, 3.0), "B": (2.0, 2.8), "C": (2.0, 2.6), "D": (2.0, 2.4)})

        highlights = generate_highlights(snapshot, None, None)

        assert highlights[0].description.startswith("3 collaborators")
        assert "D (" not in highlights[0].description
        assert highlights[0].value == 50.0

    @pytest.mark.parametrize("previous, current", [(3.125, 3.1875), (3.125, 3.0625)])
    def test_exactly_two_percent_gives_no_org_highlight(self, previous, current):
        assert generate_highlights(build_snapshot([], []), current, previous) == []

    @pytest.mark.parametrize("previous, current, kind, priority", [
        (2.5, 2.625, "achievement", "medium"),
        (2.5, 2.375, "concern", "medium"),
        (2.5, 2.75, "achievement", "high"),
        (2.5, 2.25, "concern", "high"),
    ])
    def test_org_highlight_priority(self, previous, current, kind, priority):
        highlights = generate_highlights(build_snapshot([], []), current, previous)

        assert [(h.type, h.priority) for h in highlights] == [(kind, priority)]
