# thesis_app/scoring/rankings.py
"""
Leaderboard Calculator
----------------------
Ranks thesis groups or individual students from submitted/locked panel
evaluations.

Per score row:
    normalized = clamp01((score − min) / (max − min))     if max > min
               = clamp01(score / max)                     elif max > 0
               = 0                                        otherwise
    weighted_score += normalized × weight
    weighted_max   += weight                              (weight ≤ 0 → skipped)

Per target:
    percentage = weighted_score / weighted_max × 100      (2 d.p.)

Ordering: percentage desc, latest defense desc, label asc; missing values last.
"""
import structlog
from dataclasses import dataclass, field as dc_field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set

from thesis_app.scoring.utils import (
    clamp01,
    field,
    id_key,
    to_datetime,
    to_number,
    to_optional_number,
    to_percentage,
)

logger = structlog.get_logger(__name__)

COUNTED_STATUSES = frozenset({"submitted", "locked"})
TARGET_TYPES = ("group", "student")


@dataclass
class RankAccumulator:
    """Running totals for one ranking target."""
    target_id: str
    weighted_score: float = 0.0
    weighted_max: float = 0.0
    evaluation_ids: Set[str] = dc_field(default_factory=set)
    latest_defense_at: Optional[datetime] = None
    group_id: Optional[str] = None


@dataclass
class RankingRow:
    """One ranked leaderboard entry."""
    target_id: str
    label: Optional[str]
    group_id: Optional[str]
    percentage: Optional[float]
    submitted_evaluations: int
    latest_defense_at: Optional[datetime]
    rank: int = 0


def contribution(score: float, criterion: Any) -> tuple:
    """Return (weighted_score, weighted_max) for one score against its criterion."""
    weight = to_number(field(criterion, "weight"), 1.0)
    if weight <= 0:
        return 0.0, 0.0

    min_score = to_number(field(criterion, "min_score", "minScore"), 0.0)
    max_score = to_number(field(criterion, "max_score", "maxScore"), 100.0)

    normalized = 0.0
    if max_score > min_score:
        normalized = (score - min_score) / (max_score - min_score)
    elif max_score > 0:
        normalized = score / max_score

    return clamp01(normalized) * weight, weight


def accumulate(
    target: str,
    evaluations: Iterable[Any],
    scores: Iterable[Any],
    criteria: Iterable[Any],
    schedules: Mapping[str, Any],
) -> List[RankAccumulator]:
    """
    Fold score rows into per-target accumulators.

    Args:
        target:      "group" or "student"; rows with another target_type are ignored.
        evaluations: Evaluation rows; only submitted/locked ones count.
        scores:      evaluation_scores rows.
        criteria:    rubric_criteria rows (any template).
        schedules:   schedule id (lower-cased) → row with group_id / scheduled_at.
    """
    if target not in TARGET_TYPES:
        raise ValueError(f"target must be one of {TARGET_TYPES}, got {target!r}")

    eval_map: Dict[str, Any] = {}
    for row in evaluations:
        if str(field(row, "status", default="")).lower() in COUNTED_STATUSES:
            eval_map[id_key(field(row, "id"))] = row
    if not eval_map:
        return []

    criterion_map = {id_key(field(c, "id")): c for c in criteria}

    seen: Set[str] = set()
    acc_map: Dict[str, RankAccumulator] = {}

    for score_row in scores:
        if str(field(score_row, "target_type", default="")).lower() != target:
            continue
        evaluation = eval_map.get(id_key(field(score_row, "evaluation_id")))
        if evaluation is None:
            continue

        dedupe_key = ":".join(
            id_key(field(score_row, name))
            for name in ("evaluation_id", "criterion_id", "target_type", "target_id")
        )
        if dedupe_key in seen:
            continue
        seen.add(dedupe_key)

        score = to_optional_number(field(score_row, "score"))
        if score is None:
            continue

        criterion = criterion_map.get(id_key(field(score_row, "criterion_id")), {})
        weighted_score, weighted_max = contribution(score, criterion)

        target_id = str(field(score_row, "target_id"))
        acc_key = id_key(target_id)
        current = acc_map.get(acc_key)
        if current is None:
            current = RankAccumulator(
                target_id=target_id,
                group_id=target_id if target == "group" else None,
            )
            acc_map[acc_key] = current

        current.weighted_score += weighted_score
        current.weighted_max += weighted_max
        current.evaluation_ids.add(id_key(field(evaluation, "id")))

        schedule = schedules.get(id_key(field(evaluation, "schedule_id")))
        schedule_group = field(schedule, "group_id") if schedule is not None else None
        defense_at = to_datetime(field(schedule, "scheduled_at")) if schedule is not None else None
        defense_at = defense_at or to_datetime(field(evaluation, "created_at"))

        if defense_at is not None and (current.latest_defense_at is None or defense_at > current.latest_defense_at):
            current.latest_defense_at = defense_at
            if target == "student" and schedule_group:
                current.group_id = str(schedule_group)
        elif target == "student" and not current.group_id and schedule_group:
            current.group_id = str(schedule_group)

    return list(acc_map.values())


def rank(
    accumulators: Iterable[RankAccumulator],
    labels: Optional[Mapping[str, Optional[str]]] = None,
    limit: Optional[int] = None,
) -> List[RankingRow]:
    """
    Turn accumulators into ordered, ranked rows.

    Args:
        accumulators: Output of accumulate().
        labels:       target id (lower-cased) → display label (group title / student name).
        limit:        Keep only the top N when positive.
    """
    labels = labels or {}
    rows = [
        RankingRow(
            target_id=acc.target_id,
            label=labels.get(id_key(acc.target_id)),
            group_id=acc.group_id,
            percentage=to_percentage(acc.weighted_score, acc.weighted_max),
            submitted_evaluations=len(acc.evaluation_ids),
            latest_defense_at=acc.latest_defense_at,
        )
        for acc in accumulators
    ]

    def sort_key(row: RankingRow):
        ts = row.latest_defense_at.timestamp() if row.latest_defense_at else None
        return (
            row.percentage is None,
            -(row.percentage or 0.0),
            ts is None,
            -(ts or 0.0),
            (row.label or row.target_id).lower(),
        )

    rows.sort(key=sort_key)
    for index, row in enumerate(rows):
        row.rank = index + 1

    logger.info(
        "rankings_computed",
        targets=len(rows),
        top_percentage=rows[0].percentage if rows else None,
        limit=limit,
    )

    if limit is not None and limit > 0:
        return rows[:limit]
    return rows
