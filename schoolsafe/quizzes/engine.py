"""Quiz scoring, submissions and leaderboards.

A submission is scored index by index against the quiz's question order:
missing answers count as wrong, extra answers are ignored, and the score is
``round_half_up(100 * correct / questions)``. Whether a submission passed is
never stored; it is derived from the quiz's passing score when read.
"""
import logging
from collections.abc import Sequence
from datetime import datetime
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from schoolsafe.auth.deps import RequestContext
from schoolsafe.errors import Forbidden, NotFound, ValidationError
from schoolsafe.models.quiz import Quiz, QuizSubmission
from schoolsafe.models.resource import Resource
from schoolsafe.models.user import User
from schoolsafe.schemas.quiz import QuizCreate
from schoolsafe.utils.rounding import rounded_percent

logger = logging.getLogger(__name__)


def _selected_answer(entry: Any) -> int | None:
    if entry is None:
        return None
    if isinstance(entry, dict):
        if "selectedAnswer" in entry:
            return entry["selectedAnswer"]
        return entry.get("selected_answer")
    return getattr(entry, "selected_answer", None)


def score_answers(questions: Sequence[dict], answers: Sequence[Any]) -> tuple[list[dict], int]:
    """Grade ``answers`` against ``questions``; returns (per-question results, score)."""
    results = []
    correct = 0
    for index, question in enumerate(questions):
        selected = _selected_answer(answers[index]) if index < len(answers) else None
        is_correct = selected is not None and selected == question["correctAnswer"]
        if is_correct:
            correct += 1
        results.append({
            "questionIndex": index,
            "selectedAnswer": selected,
            "isCorrect": is_correct,
        })

    score = rounded_percent(correct, len(questions))
    return results, score


def has_passed(score: int, quiz: Quiz) -> bool:
    return score >= quiz.passing_score


def get_tenant_quiz(db: Session, ctx: RequestContext, quiz_id: int) -> Quiz:
    quiz = db.query(Quiz).filter(Quiz.id == quiz_id, Quiz.tenant_id == ctx.tenant_id).first()
    if quiz is None:
        raise NotFound("Quiz not found")
    return quiz


def submit_quiz(
    db: Session,
    ctx: RequestContext,
    quiz_id: int,
    answers: Sequence[Any],
    time_taken: int | None = None,
    completed_at: datetime | None = None,
) -> QuizSubmission:
    quiz = get_tenant_quiz(db, ctx, quiz_id)
    if not isinstance(answers, (list, tuple)):
        raise ValidationError("answers must be an array")

    results, score = score_answers(quiz.questions, answers)
    submission = QuizSubmission(
        quiz_id=quiz.id,
        student_id=ctx.user_id,
        answers=results,
        score=score,
        time_taken=time_taken,
        completed_at=completed_at or datetime.utcnow(),
    )
    db.add(submission)
    db.commit()
    db.refresh(submission)
    logger.info(
        "quiz %s submitted by student %s: score=%s passed=%s",
        quiz.id, ctx.user_id, score, has_passed(score, quiz),
    )
    return submission


def get_leaderboard(db: Session, ctx: RequestContext, quiz_id: int) -> list[dict]:
    """Best score per student, ties broken by the earlier last attempt."""
    quiz = get_tenant_quiz(db, ctx, quiz_id)

    best_score = func.max(QuizSubmission.score)
    last_attempt = func.max(QuizSubmission.completed_at)
    rows = (
        db.query(
            QuizSubmission.student_id.label("student_id"),
            User.first_name.label("first_name"),
            User.last_name.label("last_name"),
            best_score.label("best_score"),
            func.count(QuizSubmission.id).label("attempts"),
            last_attempt.label("last_attempt"),
        )
        .join(User, User.id == QuizSubmission.student_id)
        .filter(QuizSubmission.quiz_id == quiz.id)
        .group_by(QuizSubmission.student_id, User.first_name, User.last_name)
        .order_by(best_score.desc(), last_attempt.asc(), QuizSubmission.student_id.asc())
        .all()
    )
    return [dict(row._mapping) for row in rows]


# ----- read side -----

def _brief(user: User | None) -> dict | None:
    if user is None:
        return None
    return {"id": user.id, "first_name": user.first_name, "last_name": user.last_name,
            "role": user.role, "grade": user.grade}


def quiz_to_dict(quiz: Quiz, creator: User | None = None) -> dict:
    return {
        "id": quiz.id,
        "title": quiz.title,
        "description": quiz.description,
        "questions": quiz.questions,
        "tenant_id": quiz.tenant_id,
        "created_by": quiz.created_by,
        "creator": _brief(creator),
        "resource_id": quiz.resource_id,
        "time_limit": quiz.time_limit,
        "passing_score": quiz.passing_score,
        "category": quiz.category,
        "xp_reward": quiz.xp_reward,
        "created_at": quiz.created_at,
    }


def submission_to_dict(submission: QuizSubmission, quiz: Quiz, student: User | None = None) -> dict:
    return {
        "id": submission.id,
        "quiz_id": submission.quiz_id,
        "student_id": submission.student_id,
        "answers": submission.answers,
        "score": submission.score,
        "time_taken": submission.time_taken,
        "completed_at": submission.completed_at,
        "passed": has_passed(submission.score, quiz),
        "quiz": {"id": quiz.id, "title": quiz.title,
                 "passing_score": quiz.passing_score, "category": quiz.category},
        "student": _brief(student),
    }


def list_quizzes(db: Session, ctx: RequestContext, created_by: int | None = None) -> list[dict]:
    query = (
        db.query(Quiz, User)
        .outerjoin(User, User.id == Quiz.created_by)
        .filter(Quiz.tenant_id == ctx.tenant_id)
    )
    if created_by is not None:
        query = query.filter(Quiz.created_by == created_by)
    rows = query.order_by(Quiz.created_at.desc(), Quiz.id.desc()).all()
    return [quiz_to_dict(quiz, creator) for quiz, creator in rows]


def get_quiz(db: Session, ctx: RequestContext, quiz_id: int) -> dict:
    quiz = get_tenant_quiz(db, ctx, quiz_id)
    return quiz_to_dict(quiz, db.get(User, quiz.created_by))


def create_quiz(db: Session, ctx: RequestContext, body: QuizCreate) -> dict:
    if body.resource_id is not None:
        resource = db.query(Resource).filter(
            Resource.id == body.resource_id, Resource.tenant_id == ctx.tenant_id
        ).first()
        if resource is None:
            raise NotFound("Resource not found")

    quiz = Quiz(
        title=body.title,
        description=body.description,
        questions=[q.model_dump(by_alias=True) for q in body.questions],
        tenant_id=ctx.tenant_id,
        created_by=ctx.user_id,
        resource_id=body.resource_id,
        time_limit=body.time_limit,
        passing_score=body.passing_score,
        category=body.category,
        xp_reward=body.xp_reward,
    )
    db.add(quiz)
    db.commit()
    db.refresh(quiz)
    logger.info("quiz %s created by %s with %d questions", quiz.id, ctx.user_id, len(quiz.questions))
    return quiz_to_dict(quiz, db.get(User, ctx.user_id))


def delete_quiz(db: Session, ctx: RequestContext, quiz_id: int) -> None:
    quiz = get_tenant_quiz(db, ctx, quiz_id)
    if quiz.created_by != ctx.user_id:
        raise Forbidden("Not authorized to delete this quiz")

    removed = (
        db.query(QuizSubmission)
        .filter(QuizSubmission.quiz_id == quiz.id)
        .delete(synchronize_session=False)
    )
    db.delete(quiz)
    db.commit()
    logger.info("quiz %s deleted with %d submissions", quiz_id, removed)


def list_submissions(db: Session, ctx: RequestContext, quiz_id: int) -> list[dict]:
    quiz = get_tenant_quiz(db, ctx, quiz_id)
    query = (
        db.query(QuizSubmission, User)
        .outerjoin(User, User.id == QuizSubmission.student_id)
        .filter(QuizSubmission.quiz_id == quiz.id)
    )
    if ctx.role == "student":
        query = query.filter(QuizSubmission.student_id == ctx.user_id)
    rows = query.order_by(QuizSubmission.completed_at.desc(), QuizSubmission.id.desc()).all()
    return [submission_to_dict(sub, quiz, student) for sub, student in rows]


def student_submissions(db: Session, student_id: int) -> list[dict]:
    rows = (
        db.query(QuizSubmission, Quiz)
        .join(Quiz, Quiz.id == QuizSubmission.quiz_id)
        .filter(QuizSubmission.student_id == student_id)
        .order_by(QuizSubmission.completed_at.desc(), QuizSubmission.id.desc())
        .all()
    )
    return [submission_to_dict(sub, quiz) for sub, quiz in rows]
