"""
Peer benchmarking: live ranking of a collaborator inside peer cohorts.
"""

import math
from typing import Callable, Dict, Iterable, Optional

from app.schemas.assessment import Collaborator
from app.schemas.evolution import Benchmarking, CohortRanking
from app.utils.numbers import round_to


def rank_in_cohort(score: Optional[float], cohort_scores: Iterable[Optional[float]]) -> CohortRanking:
    """
    Rank ``score`` within a cohort sorted by score descending.

    Ties share the best position (1 + number of strictly higher scores), so
    the result does not depend on cohort order. ``score`` must be one of the
    cohort's scores; a missing score yields an unranked entry.
    """
    scores = [s for s in cohort_scores if s is not None]
    total = len(scores)
    if score is None or total == 0:
        return CohortRanking(rank=None, total_in_cohort=total, percentile=None)

    rank = 1 + sum(1 for s in scores if s > score)
    percentile = (total - rank) / total * 100
    return CohortRanking(rank=rank, total_in_cohort=total, percentile=round_to(percentile, 2))


def top_percent_label(ranking: CohortRanking) -> Optional[str]:
    """Human readable standing, e.g. ``Top 20%``; None when there is no one to rank against."""
    if ranking.rank is None or ranking.total_in_cohort < 2:
        return None
    return f"Top {math.ceil(ranking.rank / ranking.total_in_cohort * 100)}%"


def cohort_ranking(
    collaborator: Collaborator,
    collaborators: Iterable[Collaborator],
    scores: Dict[str, Optional[float]],
    same_cohort: Callable[[Collaborator, Collaborator], bool],
) -> CohortRanking:
    cohort = [c for c in collaborators if c.id == collaborator.id or same_cohort(collaborator, c)]
    return rank_in_cohort(scores.get(collaborator.id), [scores.get(c.id) for c in cohort])


def same_business_unit(a: Collaborator, b: Collaborator) -> bool:
    return a.business_unit is not None and a.business_unit == b.business_unit


def same_seniority(a: Collaborator, b: Collaborator) -> bool:
    return a.seniority is not None and a.seniority == b.seniority


def same_job_title(a: Collaborator, b: Collaborator) -> bool:
    return a.job_title is not None and a.job_title == b.job_title


def calculate_benchmarking(
    collaborator: Collaborator,
    collaborators: Iterable[Collaborator],
    current_scores: Dict[str, Optional[float]],
) -> Benchmarking:
    """
    Business-unit and seniority standing of ``collaborator``.

    ``current_scores`` maps collaborator id to the score being ranked
    (typically the latest committee final score).
    """
    collaborators = list(collaborators)
    by_unit = cohort_ranking(collaborator, collaborators, current_scores, same_business_unit)
    by_seniority = cohort_ranking(collaborator, collaborators, current_scores, same_seniority)
    return Benchmarking(
        current_score=current_scores.get(collaborator.id),
        business_unit=by_unit,
        seniority=by_seniority,
    )
