# thesis_app/scoring/aggregator.py
"""
Rubric Score Aggregation
------------------------
Two read-only summaries over a rubric's criterion rows.

ScoreSummary (evaluation detail / inspect views):
    weighted_average = Σ (score × weight) / Σ weight      over scored rows only
    weight falls back to 1 when missing or unparsable; unscored rows still
    count toward `rows`. Division by zero yields 0.

EvaluationPercentage (rankings / reports):
    overall_percentage = Σ (score × weight) / Σ (max_score × weight) × 100
    over every criterion of the template; unscored criteria contribute 0.
"""
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional

from thesis_app.scoring.utils import field, id_key, to_number, to_optional_number


@dataclass(frozen=True)
class ScoreSummary:
    """Output of summarize_scores()."""
    rows: int
    scored_count: int
    total_weight: float
    weighted_sum: float
    weighted_average: float


@dataclass(frozen=True)
class EvaluationPercentage:
    """Output of evaluation_percentage()."""
    criteria_count: int
    criteria_scored: int
    weighted_score: float
    weighted_max: float
    overall_percentage: float


def summarize_scores(rows: Optional[Iterable[Any]]) -> ScoreSummary:
    """
    Weighted average of scored criterion rows.

    Args:
        rows: Criterion score rows (dicts or objects) carrying `weight` and
              `score`. Never mutated.

    Returns:
        ScoreSummary; never raises.
    """
    items = list(rows or [])
    scored_count = 0
    total_weight = 0.0
    weighted_sum = 0.0

    for row in items:
        weight = to_number(field(row, "weight"), 1.0)
        score = to_optional_number(field(row, "score"))
        if score is None:
            continue
        scored_count += 1
        total_weight += weight
        weighted_sum += score * weight

    average = weighted_sum / total_weight if total_weight > 0 else 0.0

    return ScoreSummary(
        rows=len(items),
        scored_count=scored_count,
        total_weight=total_weight,
        weighted_sum=weighted_sum,
        weighted_average=average,
    )


def evaluation_percentage(
    criteria: Iterable[Any],
    scores: Iterable[Any],
) -> EvaluationPercentage:
    """
    Overall percentage for one evaluation against its rubric template.

    Args:
        criteria: Template criteria (`id`, `weight`, `max_score`).
        scores:   Score rows (`criterion_id`, `score`). Rows for criteria
                  outside the template are ignored; the last row per
                  criterion wins.
    """
    by_criterion: Dict[str, Optional[float]] = {}
    for row in scores or []:
        by_criterion[id_key(field(row, "criterion_id", "criterionId"))] = to_optional_number(field(row, "score"))

    criteria_count = 0
    criteria_scored = 0
    weighted_score = 0.0
    weighted_max = 0.0

    for criterion in criteria or []:
        criteria_count += 1
        weight = to_number(field(criterion, "weight"), 1.0)
        max_score = to_number(field(criterion, "max_score", "maxScore"), 0.0)
        score = by_criterion.get(id_key(field(criterion, "id", "criterion_id")))
        if score is not None:
            criteria_scored += 1
            weighted_score += score * weight
        weighted_max += max_score * weight

    percentage = round(weighted_score / weighted_max * 100, 2) if weighted_max != 0 else 0.0

    return EvaluationPercentage(
        criteria_count=criteria_count,
        criteria_scored=criteria_scored,
        weighted_score=round(weighted_score, 3),
        weighted_max=round(weighted_max, 3),
        overall_percentage=percentage,
    )
