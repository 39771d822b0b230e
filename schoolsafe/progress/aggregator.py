"""Derived progress metrics.

Nothing here is stored: every figure is recomputed from quizzes, submissions,
resources and completions when asked for. Values stay floating point until
:meth:`ProgressSnapshot.as_dict` rounds them for presentation.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from sqlalchemy import func
from sqlalchemy.orm import Session

from schoolsafe.auth.deps import RequestContext
from schoolsafe.errors import Forbidden, NotFound
from schoolsafe.models.alert import Alert
from schoolsafe.models.drill import Drill
from schoolsafe.models.quiz import Quiz, QuizSubmission
from schoolsafe.models.resource import Resource, ResourceCompletion
from schoolsafe.models.user import User
from schoolsafe.quizzes.engine import student_submissions
from schoolsafe.resources.service import student_completions
from schoolsafe.utils.rounding import round_half_up, rounded_percent, percent

logger = logging.getLogger(__name__)

TIME_RANGES = {"7days": 7, "30days": 30}
TOP_N = 5


@dataclass
class ProgressSnapshot:
    quizzes: float
    resources: float
    overall: float
    average_score: float
    completed_quizzes: int
    completed_resources: int
    total_quizzes: int
    total_resources: int

    def as_dict(self) -> dict:
        return {
            "overall": round_half_up(self.overall),
            "quizzes": round_half_up(self.quizzes),
            "resources": round_half_up(self.resources),
            "average_score": round_half_up(self.average_score),
        }


def tenant_totals(db: Session, tenant_id: int) -> tuple[int, int]:
    total_quizzes = db.query(func.count(Quiz.id)).filter(Quiz.tenant_id == tenant_id).scalar()
    total_resources = (
        db.query(func.count(Resource.id))
        .filter(Resource.tenant_id == tenant_id, Resource.is_public.is_(True))
        .scalar()
    )
    return total_quizzes or 0, total_resources or 0


def build_snapshot(scores: list[int], completed_resources: int, total_quizzes: int, total_resources: int) -> ProgressSnapshot:
    # every submission counts, repeated attempts on one quiz included
    completed_quizzes = len(scores)
    quiz_progress = percent(completed_quizzes, total_quizzes)
    resource_progress = percent(completed_resources, total_resources)
    return ProgressSnapshot(
        quizzes=quiz_progress,
        resources=resource_progress,
        overall=(quiz_progress + resource_progress) / 2,
        average_score=sum(scores) / len(scores) if scores else 0.0,
        completed_quizzes=completed_quizzes,
        completed_resources=completed_resources,
        total_quizzes=total_quizzes,
        total_resources=total_resources,
    )


def compute_student_progress(db: Session, student_id: int, tenant_id: int) -> ProgressSnapshot:
    scores = [
        score for (score,) in
        db.query(QuizSubmission.score).filter(QuizSubmission.student_id == student_id).all()
    ]
    completed_resources = (
        db.query(func.count(ResourceCompletion.id))
        .filter(ResourceCompletion.student_id == student_id)
        .scalar()
    ) or 0
    total_quizzes, total_resources = tenant_totals(db, tenant_id)
    return build_snapshot(scores, completed_resources, total_quizzes, total_resources)


def student_info(student: User) -> dict:
    return {
        "id": student.id,
        "first_name": student.first_name,
        "last_name": student.last_name,
        "grade": student.grade,
        "school": student.school or "Not specified",
    }


def find_tenant_student(db: Session, tenant_id: int, student_id: int) -> User:
    student = db.query(User).filter(
        User.id == student_id, User.tenant_id == tenant_id, User.role == "student"
    ).first()
    if student is None:
        raise NotFound("Student not found")
    return student


def check_student_visibility(ctx: RequestContext, student_id: int) -> None:
    if ctx.role == "student" and ctx.user_id != student_id:
        raise Forbidden("Access denied")
    if ctx.role == "parent" and ctx.student_id != student_id:
        raise Forbidden("Access denied")


def get_student_progress(db: Session, ctx: RequestContext, student_id: int) -> dict:
    check_student_visibility(ctx, student_id)
    student = find_tenant_student(db, ctx.tenant_id, student_id)
    snapshot = compute_student_progress(db, student.id, ctx.tenant_id)
    return {
        "student": student_info(student),
        "progress": snapshot.as_dict(),
        "quiz_submissions": student_submissions(db, student.id),
        "resource_completions": student_completions(db, student.id),
    }


def active_students(db: Session, tenant_id: int) -> list[User]:
    return (
        db.query(User)
        .filter(User.tenant_id == tenant_id, User.role == "student", User.is_active.is_(True))
        .order_by(User.first_name, User.last_name, User.id)
        .all()
    )


def compute_class_progress(db: Session, tenant_id: int) -> list[dict]:
    report = []
    for student in active_students(db, tenant_id):
        snapshot = compute_student_progress(db, student.id, tenant_id)
        report.append({
            "student": student_info(student),
            "progress": snapshot.as_dict(),
            "completed_quizzes": snapshot.completed_quizzes,
            "completed_resources": snapshot.completed_resources,
        })
    return report


def parse_time_range(value: str | None) -> int:
    return TIME_RANGES.get(value or "", TIME_RANGES["7days"])


def compute_tenant_analytics(db: Session, tenant_id: int, window_days: int, today: date | None = None) -> dict:
    """Trailing-window activity report for a tenant's director."""
    today = today or datetime.utcnow().date()
    days = [today - timedelta(days=window_days - i - 1) for i in range(window_days)]
    start = datetime.combine(days[0], time.min)
    end = datetime.combine(today + timedelta(days=1), time.min)

    students = active_students(db, tenant_id)
    student_ids = {s.id for s in students}
    resources = db.query(Resource).filter(Resource.tenant_id == tenant_id).all()
    quizzes = db.query(Quiz).filter(Quiz.tenant_id == tenant_id).all()

    submissions = (
        db.query(QuizSubmission)
        .join(Quiz, Quiz.id == QuizSubmission.quiz_id)
        .filter(
            Quiz.tenant_id == tenant_id,
            QuizSubmission.completed_at >= start,
            QuizSubmission.completed_at < end,
        )
        .all()
    )
    completions = (
        db.query(ResourceCompletion)
        .join(Resource, Resource.id == ResourceCompletion.resource_id)
        .filter(
            Resource.tenant_id == tenant_id,
            ResourceCompletion.completed_at >= start,
            ResourceCompletion.completed_at < end,
        )
        .all()
    )

    active_by_day: dict[str, set[int]] = {d.isoformat(): set() for d in days}
    for record in [*submissions, *completions]:
        active_by_day[record.completed_at.date().isoformat()].add(record.student_id)

    registrations: dict[str, int] = {}
    for student in students:
        if student.created_at is not None:
            key = student.created_at.date().isoformat()
            registrations[key] = registrations.get(key, 0) + 1

    user_activity = [
        {
            "date": d,
            "active_users": len(active_by_day[d.isoformat()]),
            "new_registrations": registrations.get(d.isoformat(), 0),
        }
        for d in days
    ]

    completions_by_resource: dict[int, int] = {}
    for completion in completions:
        completions_by_resource[completion.resource_id] = completions_by_resource.get(completion.resource_id, 0) + 1
    resource_usage = sorted(
        (
            {
                "resource_id": r.id,
                "name": r.title,
                "completions": completions_by_resource.get(r.id, 0),
                "completion_rate": rounded_percent(completions_by_resource.get(r.id, 0), len(students)),
            }
            for r in resources
        ),
        key=lambda item: (-item["completions"], item["resource_id"]),
    )[:TOP_N]

    scores_by_quiz: dict[int, list[int]] = {}
    for submission in submissions:
        scores_by_quiz.setdefault(submission.quiz_id, []).append(submission.score)
    quiz_performance = []
    for quiz in quizzes:
        scores = scores_by_quiz.get(quiz.id, [])
        average = sum(scores) / len(scores) if scores else 0.0
        quiz_performance.append({
            "quiz_id": quiz.id,
            "category": quiz.category,
            "title": quiz.title,
            "average_score": round_half_up(average),
            "participants": len(scores),
            "total_questions": len(quiz.questions or []),
            "_average": average,
        })
    quiz_performance.sort(key=lambda item: (-item["_average"], item["quiz_id"]))
    quiz_performance = quiz_performance[:TOP_N]
    for item in quiz_performance:
        del item["_average"]

    all_scores = [s.score for s in submissions]
    engaged = {s.student_id for s in submissions} | {c.student_id for c in completions}
    active_alerts = (
        db.query(func.count(Alert.id))
        .filter(Alert.tenant_id == tenant_id, Alert.dismissed.is_(False))
        .scalar()
    ) or 0

    system_metrics = {
        "total_users": len(students),
        "active_users": sum(1 for s in students if s.last_active is not None),
        "total_resources": len(resources),
        "active_alerts": active_alerts,
        "avg_quiz_score": round_half_up(sum(all_scores) / len(all_scores)) if all_scores else 0,
        "total_completions": len(completions),
        "engagement_rate": rounded_percent(len(engaged & student_ids), len(students)),
    }

    logger.info(
        "analytics for tenant %s over %d days: %d submissions, %d completions",
        tenant_id, window_days, len(submissions), len(completions),
    )
    return {
        "window_days": window_days,
        "user_activity": user_activity,
        "resource_usage": resource_usage,
        "quiz_performance": quiz_performance,
        "system_metrics": system_metrics,
    }


def director_stats(db: Session, tenant_id: int) -> dict:
    def count_users(role: str) -> int:
        return db.query(func.count(User.id)).filter(
            User.tenant_id == tenant_id, User.role == role, User.is_active.is_(True)
        ).scalar() or 0

    return {
        "total_students": count_users("student"),
        "total_teachers": count_users("teacher"),
        "total_resources": db.query(func.count(Resource.id)).filter(Resource.tenant_id == tenant_id).scalar() or 0,
        "total_quizzes": db.query(func.count(Quiz.id)).filter(Quiz.tenant_id == tenant_id).scalar() or 0,
        "total_drills": db.query(func.count(Drill.id)).filter(Drill.tenant_id == tenant_id).scalar() or 0,
        "active_alerts": db.query(func.count(Alert.id)).filter(
            Alert.tenant_id == tenant_id, Alert.dismissed.is_(False)
        ).scalar() or 0,
    }
