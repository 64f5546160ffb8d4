"""
scoring/ - rubric score computations

Modules:
    utils.py       - Loose numeric / datetime coercion
    aggregator.py  - Weighted-average ScoreSummary and EvaluationPercentage
    rankings.py    - Group and student leaderboards
"""
from thesis_app.scoring.aggregator import (
    EvaluationPercentage,
    ScoreSummary,
    evaluation_percentage,
    summarize_scores,
)

__all__ = [
    "EvaluationPercentage",
    "ScoreSummary",
    "evaluation_percentage",
    "summarize_scores",
]
