"""Ministry-level rollups.

Aggregation happens in plain Python over a snapshot of users, enrollments
and scored lesson progress, so each count is taken over the right
population without join fan-out. Identical snapshots always produce
identical output.
"""
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional
from sqlalchemy.orm import Session

from lms.core.capabilities import SchemaCapabilities
from lms.core.constants import ACTIVE_LEARNER_WINDOW_DAYS, DeadlineStatusEnum, FeatureEnum, LEARNER_ROLES
from lms.crud.enrollment import enrollment as crud_enrollment
from lms.crud.lesson_progress import lesson_progress as crud_lesson_progress
from lms.crud.ministry_course_stats import ministry_course_stats as crud_ministry_course_stats
from lms.crud.user import user as crud_user
from lms.schemas.report import MinistryCourseStats, MinistryStats, ProjectionRefreshResult
from lms.services.deadline import classify_deadline, effective_deadline
from lms.utils.numbers import percentage, round_half_up, rounded_mean

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LearnerRecord:
    user_id: int
    ministry: str
    is_learner: bool
    last_login: Optional[datetime] = None


@dataclass(frozen=True)
class EnrollmentRecord:
    user_id: int
    course_id: int
    completed_at: Optional[datetime] = None
    deadline: Optional[datetime] = None


@dataclass(frozen=True)
class ScoreRecord:
    user_id: int
    course_id: int
    quiz_score: int


@dataclass
class MinistrySnapshot:
    learners: List[LearnerRecord] = field(default_factory=list)
    enrollments: List[EnrollmentRecord] = field(default_factory=list)
    scores: List[ScoreRecord] = field(default_factory=list)
    course_titles: Dict[int, str] = field(default_factory=dict)


def _is_overdue(record: EnrollmentRecord, now: datetime) -> bool:
    status, _ = classify_deadline(record.deadline, record.completed_at, now)
    return status == DeadlineStatusEnum.OVERDUE


def aggregate_ministry_stats(snapshot: MinistrySnapshot, now: datetime) -> List[MinistryStats]:
    """Per-ministry engagement for learner accounts (LEARNER and SUPERUSER)."""
    active_since = now - timedelta(days=ACTIVE_LEARNER_WINDOW_DAYS)
    members = defaultdict(list)
    for learner in snapshot.learners:
        if learner.is_learner:
            members[learner.ministry].append(learner)

    enrollments_by_user = defaultdict(list)
    for record in snapshot.enrollments:
        enrollments_by_user[record.user_id].append(record)
    scores_by_user = defaultdict(list)
    for record in snapshot.scores:
        scores_by_user[record.user_id].append(record.quiz_score)

    stats = []
    for ministry, learners in members.items():
        enrollments = [e for learner in learners for e in enrollments_by_user[learner.user_id]]
        scores = [s for learner in learners for s in scores_by_user[learner.user_id]]
        stats.append(MinistryStats(
            name=ministry,
            total_learners=len(learners),
            active_learners=sum(
                1 for learner in learners
                if learner.last_login is not None and learner.last_login > active_since
            ),
            courses_completed=sum(1 for e in enrollments if e.completed_at is not None),
            overdue_count=sum(1 for e in enrollments if _is_overdue(e, now)),
            avg_quiz_score=rounded_mean(scores),
        ))

    stats.sort(key=lambda s: (-s.total_learners, s.name))
    return stats


def _course_rows(snapshot: MinistrySnapshot, now: datetime, ministry: Optional[str] = None) -> List[dict]:
    ministry_of = {learner.user_id: learner.ministry for learner in snapshot.learners}

    groups = defaultdict(lambda: {"enrolled": set(), "completed": set(), "overdue": 0, "scores": []})
    for record in snapshot.enrollments:
        user_ministry = ministry_of.get(record.user_id)
        if user_ministry is None or (ministry and user_ministry != ministry):
            continue
        group = groups[(user_ministry, record.course_id)]
        group["enrolled"].add(record.user_id)
        if record.completed_at is not None:
            group["completed"].add(record.user_id)
        if _is_overdue(record, now):
            group["overdue"] += 1

    for record in snapshot.scores:
        key = (ministry_of.get(record.user_id), record.course_id)
        if key in groups:
            groups[key]["scores"].append(record.quiz_score)

    rows = []
    for (user_ministry, course_id), group in groups.items():
        scores = group["scores"]
        rows.append({
            "ministry": user_ministry,
            "course_id": course_id,
            "enrolled_count": len(group["enrolled"]),
            "completed_count": len(group["completed"]),
            "overdue_count": group["overdue"],
            "avg_score": sum(scores) / len(scores) if scores else 0.0,
        })
    rows.sort(key=lambda r: (r["ministry"], -r["enrolled_count"], r["course_id"]))
    return rows


def aggregate_ministry_course_stats(
    snapshot: MinistrySnapshot, now: datetime, ministry: Optional[str] = None
) -> List[MinistryCourseStats]:
    return [
        MinistryCourseStats(
            ministry=row["ministry"],
            course_id=row["course_id"],
            course_title=snapshot.course_titles.get(row["course_id"], ""),
            enrolled_count=row["enrolled_count"],
            completed_count=row["completed_count"],
            overdue_count=row["overdue_count"],
            avg_score=round_half_up(row["avg_score"]),
            completion_rate=percentage(row["completed_count"], row["enrolled_count"]),
        )
        for row in _course_rows(snapshot, now, ministry)
    ]


class MinistryService:

    def load_snapshot(self, db: Session, *, capabilities: SchemaCapabilities) -> MinistrySnapshot:
        snapshot = MinistrySnapshot()
        users = crud_user.get_with_ministry(db)
        for user in users:
            snapshot.learners.append(LearnerRecord(
                user_id=user.id,
                ministry=user.ministry,
                is_learner=user.role in LEARNER_ROLES,
                last_login=user.last_login,
            ))
        user_ids = {user.id for user in users}

        for enrollment in crud_enrollment.get_all_with_course(db):
            snapshot.course_titles[enrollment.course_id] = enrollment.course.title
            if enrollment.user_id not in user_ids:
                continue
            snapshot.enrollments.append(EnrollmentRecord(
                user_id=enrollment.user_id,
                course_id=enrollment.course_id,
                completed_at=enrollment.completed_at,
                deadline=effective_deadline(enrollment, capabilities),
            ))

        for record in crud_lesson_progress.get_all(db):
            if record.user_id in user_ids and record.quiz_score is not None:
                snapshot.scores.append(ScoreRecord(
                    user_id=record.user_id,
                    course_id=record.course_id,
                    quiz_score=record.quiz_score,
                ))
        return snapshot

    def get_ministry_stats(
        self, db: Session, *, capabilities: SchemaCapabilities, now: Optional[datetime] = None
    ) -> List[MinistryStats]:
        snapshot = self.load_snapshot(db, capabilities=capabilities)
        return aggregate_ministry_stats(snapshot, now or datetime.utcnow())

    def get_ministry_course_stats(
        self,
        db: Session,
        *,
        capabilities: SchemaCapabilities,
        ministry: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> List[MinistryCourseStats]:
        snapshot = self.load_snapshot(db, capabilities=capabilities)
        return aggregate_ministry_course_stats(snapshot, now or datetime.utcnow(), ministry=ministry)

    def refresh_ministry_course_stats(
        self, db: Session, *, capabilities: SchemaCapabilities, now: Optional[datetime] = None
    ) -> ProjectionRefreshResult:
        capabilities.require(FeatureEnum.MINISTRY_COURSE_STATS)
        now = now or datetime.utcnow()
        snapshot = self.load_snapshot(db, capabilities=capabilities)
        rows = [dict(row, updated_at=now) for row in _course_rows(snapshot, now)]
        written = crud_ministry_course_stats.replace_all(db, rows)
        logger.info(f"Rebuilt ministry course stats projection with {written} row(s)")
        return ProjectionRefreshResult(rows_written=written, refreshed_at=now)


ministry_service = MinistryService()
