"""
Tests for collaborator evolution summaries, detailed reports and pillar deep dives.
"""

import pytest

from app.core.exceptions import CollaboratorNotFoundError
from app.schemas.assessment import Pillar
from app.schemas.evolution import CriterionEvolution
from app.services.evolution import (
    PREDICTION_CONFIDENCE,
    PREDICTION_GROWTH_FACTOR,
    build_detailed_evolution,
    build_evolution_summaries,
    build_pillar_deep_dive,
    categorize_performance,
    generate_insights,
    generate_predictions,
    predict_next_score,
)
from app.services.trends import Trend


def by_id(summaries):
    return {s.collaborator_id: s for s in summaries}


class TestCategorizePerformance:

    @pytest.mark.parametrize("score, category", [
        (5.0, "high-performer"),
        (4.5, "high-performer"),
        (4.49, "solid-performer"),
        (3.5, "solid-performer"),
        (3.49, "developing"),
        (2.5, "developing"),
        (2.49, "critical"),
        (None, "critical"),
    ])
    def test_thresholds(self, score, category):
        assert categorize_performance(score) == category


class TestEvolutionSummaries:

    def test_only_collaborators_with_history(self, snapshot):
        summaries = by_id(build_evolution_summaries(snapshot))

        assert set(summaries) == {"alice", "bob", "carol"}

    def test_end_to_end_summary(self, snapshot):
        alice = by_id(build_evolution_summaries(snapshot))["alice"]

        assert alice.historical_average == 4.03
        assert alice.latest_score == 4.6
        assert alice.latest_cycle == "2025.1"
        assert alice.first_cycle == "2024.1"
        assert alice.total_cycles == 3
        assert alice.evolution_trend.trend == Trend.IMPROVING
        assert alice.evolution_trend.percentage_change == 31.43
        assert alice.evolution_trend.consecutive_cycles == 2
        assert alice.performance_category == "solid-performer"
        assert alice.manager_name == "Maria"

    def test_pillar_performance_uses_latest_cycle(self, snapshot):
        pillars = by_id(build_evolution_summaries(snapshot))["alice"].pillar_performance

        assert (pillars.behavior, pillars.execution, pillars.management) == (4.5, 5.0, 4.0)
        assert pillars.best_pillar == Pillar.EXECUTION
        assert pillars.worst_pillar == Pillar.MANAGEMENT

    def test_historical_average_is_mean_of_final_scores(self, snapshot):
        for summary in build_evolution_summaries(snapshot):
            finals = snapshot.history(summary.collaborator_id).final_scores
            assert summary.historical_average == pytest.approx(sum(finals) / len(finals), abs=0.005)

    @pytest.mark.parametrize("filter_by, expected", [
        ("improving", ["alice"]),
        ("declining", ["bob"]),
        ("stable", ["carol"]),
        ("low-performers", ["carol"]),
        ("high-performers", []),
    ])
    def test_filters(self, snapshot, filter_by, expected):
        summaries = build_evolution_summaries(snapshot, filter_by=filter_by)

        assert [s.collaborator_id for s in summaries] == expected

    def test_sorting(self, snapshot):
        ascending = build_evolution_summaries(snapshot, sort_by="latestScore", sort_order="asc")
        by_name = build_evolution_summaries(snapshot, sort_by="name")

        assert [s.collaborator_id for s in ascending] == ["carol", "bob", "alice"]
        assert [s.collaborator_id for s in by_name] == ["carol", "bob", "alice"]


class TestDetailedEvolution:

    def test_unknown_or_without_history_is_none(self, snapshot):
        assert build_detailed_evolution(snapshot, "ghost") is None
        assert build_detailed_evolution(snapshot, "erin") is None

    def test_profile_and_summary(self, snapshot):
        detail = build_detailed_evolution(snapshot, "alice")

        assert detail.collaborator.manager_name == "Maria"
        assert detail.collaborator.mentor_name == "Bob"
        assert detail.summary.total_cycles == 3
        assert detail.summary.best_score == 4.6
        assert detail.summary.worst_score == 3.5
        assert detail.summary.historical_average == 4.03
        assert detail.summary.overall_trend == Trend.IMPROVING
        assert detail.summary.consistency_score == 78

    def test_cycle_details(self, snapshot):
        cycles = {d.cycle: d for d in build_detailed_evolution(snapshot, "alice").cycle_details}

        assert list(cycles) == ["2024.1", "2024.2", "2025.1"]
        assert cycles["2024.1"].self_assessment_score == 3.25
        assert cycles["2024.1"].manager_assessment_score == 3.0
        assert cycles["2024.2"].performance_category == "solid-performer"
        assert cycles["2025.1"].performance_category == "high-performer"
        assert cycles["2025.1"].peer_assessment_score == 4.2
        assert cycles["2025.1"].peer_assessment_count == 1
        assert "Committee: Consistent delivery" in cycles["2025.1"].comments

    def test_criteria_evolution(self, snapshot):
        criteria = {c.id: c for c in build_detailed_evolution(snapshot, "alice").criteria_evolution}

        assert criteria["b1"].self_average == 4.0
        assert criteria["b1"].manager_average == 3.5
        assert criteria["b1"].committee_average is None
        assert criteria["b1"].combined_average == 3.75

    def test_benchmarking_ranks_latest_final_scores(self, snapshot):
        benchmarking = build_detailed_evolution(snapshot, "alice").benchmarking

        assert benchmarking.current_score == 4.6
        assert (benchmarking.business_unit.rank, benchmarking.business_unit.total_in_cohort) == (1, 2)
        assert benchmarking.business_unit.percentile == 50.0
        assert benchmarking.seniority.rank == 1

    def test_inactive_collaborator_is_ranked_with_active_peers(self, snapshot):
        benchmarking = build_detailed_evolution(snapshot, "dan").benchmarking

        assert benchmarking.current_score == 4.8
        assert (benchmarking.business_unit.rank, benchmarking.business_unit.total_in_cohort) == (1, 3)

    def test_predictions_are_labelled_heuristics(self, snapshot):
        predictions = build_detailed_evolution(snapshot, "alice").predictions

        assert predictions.confidence_level == PREDICTION_CONFIDENCE == 70
        assert "1.10" in predictions.method
        assert predictions.improvement_areas == ["No critical areas identified"]
        assert "Communication" in predictions.strengths
        assert "Collaboration" not in predictions.strengths

    def test_one_pillar_block_per_pillar(self, snapshot):
        detail = build_detailed_evolution(snapshot, "alice")

        assert [p.pillar for p in detail.pillar_evolution] == [Pillar.BEHAVIOR, Pillar.EXECUTION, Pillar.MANAGEMENT]


class TestInsightsAndPredictions:

    def criterion(self, id, value):
        return CriterionEvolution(id=id, description=id.upper(), pillar=Pillar.BEHAVIOR, combined_average=value)

    def test_insight_thresholds(self):
        insights = generate_insights([
            self.criterion("a", 4.0),
            self.criterion("b", 3.01),
            self.criterion("c", 3.0),
            self.criterion("d", None),
        ])

        assert [(i.type, i.related_criterion) for i in insights] == [("strength", "a"), ("weakness", "c")]

    def test_prediction_formula(self):
        assert PREDICTION_GROWTH_FACTOR == 1.10
        assert predict_next_score(4.0) == 4.4
        assert predict_next_score(None) is None

    def test_improvement_areas_below_three_and_a_half(self):
        predictions = generate_predictions([self.criterion("a", 3.4), self.criterion("b", 3.6)])

        assert predictions.improvement_areas == ["A"]
        assert predictions.strengths == ["Balanced development"]
        assert predictions.next_evaluation_prediction == 3.85


class TestPillarDeepDive:

    def test_unknown_collaborator(self, snapshot):
        with pytest.raises(CollaboratorNotFoundError):
            build_pillar_deep_dive(snapshot, "ghost", Pillar.BEHAVIOR)

    def test_collaborator_without_history(self, snapshot):
        with pytest.raises(CollaboratorNotFoundError) as e:
            build_pillar_deep_dive(snapshot, "erin", Pillar.BEHAVIOR)
        assert e.value.reason == "Collaborator has no evaluation history"

    def test_historical_series_and_summary(self, snapshot):
        detail = build_pillar_deep_dive(snapshot, "alice", Pillar.BEHAVIOR)

        assert detail.historical_data == {"2024.1": 3.5, "2024.2": 4.0, "2025.1": 4.0}
        assert detail.trend.trend == Trend.IMPROVING
        assert detail.trend.percentage_change == 14.29
        assert detail.summary.current_average == 4.0
        assert detail.summary.worst_score == 3.5
        assert detail.summary.total_variation == 0.5
        assert detail.summary.historical_average == 3.83
        assert [c.id for c in detail.criteria] == ["b1", "b2"]

    def test_assessment_type_breakdown(self, snapshot):
        breakdown = build_pillar_deep_dive(snapshot, "alice", Pillar.BEHAVIOR).assessment_type_breakdown

        assert breakdown["2024.1"].self_assessment == 3.5
        assert breakdown["2024.1"].manager_assessment == 3.0
        assert breakdown["2024.1"].self_vs_manager_gap == 0.5
        assert breakdown["2024.1"].committee_final == 3.5
        assert breakdown["2024.2"].self_vs_manager_gap is None

    def test_live_pillar_benchmark(self, snapshot):
        benchmark = build_pillar_deep_dive(snapshot, "alice", Pillar.BEHAVIOR).benchmark

        assert benchmark.vs_organization_average == 1.33
        assert benchmark.percentile_rank == 66.67
        assert benchmark.seniority_ranking == "Top 50%"
        assert benchmark.role_ranking == "Top 50%"
