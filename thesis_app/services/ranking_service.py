"""
Ranking Service - Thesis Defense Platform
thesis_app/services/ranking_service.py

Loads submitted/locked evaluations with their scores, schedules and rubric
criteria, then hands them to scoring.rankings. Full leaderboards are cached
in Redis for CACHE_TTL_RANKINGS seconds; evaluation submit/lock and rubric
edits invalidate them.
"""

import logging
from typing import Dict, List, Optional
from uuid import UUID

from thesis_app.config import settings
from thesis_app.models.ranking import (
    GroupRankingListResponse,
    GroupRankingResponse,
    StudentRankingListResponse,
    StudentRankingResponse,
)
from thesis_app.repositories.defense_schedule_repository import DefenseScheduleRepository
from thesis_app.repositories.evaluation_repository import EvaluationRepository
from thesis_app.repositories.rubric_repository import RubricRepository
from thesis_app.repositories.thesis_group_repository import ThesisGroupRepository
from thesis_app.repositories.user_repository import UserRepository
from thesis_app.scoring.rankings import COUNTED_STATUSES, RankingRow, accumulate, rank
from thesis_app.scoring.utils import id_key
from thesis_app.services.cache import TTL_RANKINGS, get_or_load, rankings_cache_key

logger = logging.getLogger(__name__)


class RankingService:
    def __init__(
        self,
        evaluations: EvaluationRepository,
        schedules: DefenseScheduleRepository,
        rubrics: RubricRepository,
        groups: ThesisGroupRepository,
        users: UserRepository,
    ):
        self.evaluations = evaluations
        self.schedules = schedules
        self.rubrics = rubrics
        self.groups = groups
        self.users = users

    def _compute(self, target: str) -> List[RankingRow]:
        evaluations = self.evaluations.list_by_statuses(sorted(COUNTED_STATUSES), settings.RANKING_SCAN_LIMIT)
        if len(evaluations) >= settings.RANKING_SCAN_LIMIT:
            logger.warning(f"Ranking scan hit RANKING_SCAN_LIMIT={settings.RANKING_SCAN_LIMIT}; older evaluations ignored")
        if not evaluations:
            return []

        scores = self.evaluations.list_scores_for_evaluations(e["id"] for e in evaluations)
        schedules = {
            id_key(s["id"]): s
            for s in self.schedules.get_many({e["schedule_id"] for e in evaluations})
        }
        criteria = self.rubrics.list_criteria_for_templates(
            {s.get("rubric_template_id") for s in schedules.values()}
        )

        accumulators = accumulate(target, evaluations, scores, criteria, schedules)
        return rank(accumulators, self._labels(target, [a.target_id for a in accumulators]))

    def _labels(self, target: str, target_ids: List[str]) -> Dict[str, Optional[str]]:
        if target == "group":
            return {id_key(g["id"]): g.get("title") for g in self.groups.get_many(target_ids)}
        return {id_key(u["id"]): u.get("name") for u in self.users.get_many(target_ids)}

    #  Groups

    def group_rankings(self, limit: Optional[int] = None) -> GroupRankingListResponse:
        return get_or_load(
            rankings_cache_key("group", limit),
            GroupRankingListResponse,
            TTL_RANKINGS,
            lambda: self._build_group_rankings(limit),
        )

    def _build_group_rankings(self, limit: Optional[int]) -> GroupRankingListResponse:
        rows = self._compute("group")
        items = [
            GroupRankingResponse(
                group_id=row.target_id,
                group_title=row.label,
                group_percentage=row.percentage,
                submitted_evaluations=row.submitted_evaluations,
                latest_defense_at=row.latest_defense_at,
                rank=row.rank,
            )
            for row in rows
        ]
        total = len(items)
        if limit is not None and limit > 0:
            items = items[:limit]
        return GroupRankingListResponse(items=items, total=total)

    def group_ranking(self, group_id: UUID) -> Optional[GroupRankingResponse]:
        key = id_key(group_id)
        for item in self.group_rankings().items:
            if id_key(item.group_id) == key:
                return item
        return None

    #  Students

    def student_rankings(self, limit: Optional[int] = None) -> StudentRankingListResponse:
        return get_or_load(
            rankings_cache_key("student", limit),
            StudentRankingListResponse,
            TTL_RANKINGS,
            lambda: self._build_student_rankings(limit),
        )

    def _build_student_rankings(self, limit: Optional[int]) -> StudentRankingListResponse:
        rows = self._compute("student")
        students = {id_key(u["id"]): u for u in self.users.get_many(r.target_id for r in rows)}
        group_titles = {
            id_key(g["id"]): g.get("title")
            for g in self.groups.get_many(r.group_id for r in rows if r.group_id)
        }

        items = []
        for row in rows:
            student = students.get(id_key(row.target_id), {})
            items.append(StudentRankingResponse(
                student_id=row.target_id,
                student_name=row.label,
                student_email=student.get("email"),
                group_id=row.group_id,
                group_title=group_titles.get(id_key(row.group_id)) if row.group_id else None,
                student_percentage=row.percentage,
                submitted_evaluations=row.submitted_evaluations,
                latest_defense_at=row.latest_defense_at,
                rank=row.rank,
            ))
        total = len(items)
        if limit is not None and limit > 0:
            items = items[:limit]
        return StudentRankingListResponse(items=items, total=total)

    def student_ranking(self, student_id: UUID) -> Optional[StudentRankingResponse]:
        key = id_key(student_id)
        for item in self.student_rankings().items:
            if id_key(item.student_id) == key:
                return item
        return None
