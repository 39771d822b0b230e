
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from schoolsafe.auth.deps import get_db, get_context, require_roles, RequestContext
from schoolsafe.schemas.quiz import QuizCreate, QuizOut, SubmitQuizIn, SubmissionOut, LeaderboardEntry
from schoolsafe.models.user import User
from schoolsafe.quizzes import engine

router = APIRouter(prefix="/quizzes", tags=["quizzes"])

@router.get("", response_model=list[QuizOut])
def list_quizzes(db: Session = Depends(get_db), ctx: RequestContext = Depends(get_context)):
    return engine.list_quizzes(db, ctx)

@router.post("", response_model=QuizOut, status_code=status.HTTP_201_CREATED)
def create_quiz(body: QuizCreate, db: Session = Depends(get_db), ctx: RequestContext = Depends(require_roles("teacher"))):
    return engine.create_quiz(db, ctx, body)

@router.get("/leaderboard/{quiz_id}", response_model=list[LeaderboardEntry])
def leaderboard(quiz_id: int, db: Session = Depends(get_db), ctx: RequestContext = Depends(get_context)):
    return engine.get_leaderboard(db, ctx, quiz_id)

@router.get("/submissions/{quiz_id}", response_model=list[SubmissionOut])
def submissions(quiz_id: int, db: Session = Depends(get_db), ctx: RequestContext = Depends(get_context)):
    return engine.list_submissions(db, ctx, quiz_id)

@router.get("/{quiz_id}", response_model=QuizOut)
def get_quiz(quiz_id: int, db: Session = Depends(get_db), ctx: RequestContext = Depends(get_context)):
    return engine.get_quiz(db, ctx, quiz_id)

@router.delete("/{quiz_id}")
def delete_quiz(quiz_id: int, db: Session = Depends(get_db), ctx: RequestContext = Depends(require_roles("teacher"))):
    engine.delete_quiz(db, ctx, quiz_id)
    return {"success": True, "message": "Quiz deleted successfully"}

@router.post("/{quiz_id}/submit", response_model=SubmissionOut, status_code=status.HTTP_201_CREATED)
def submit_quiz(quiz_id: int, body: SubmitQuizIn, db: Session = Depends(get_db), ctx: RequestContext = Depends(require_roles("student"))):
    submission = engine.submit_quiz(db, ctx, quiz_id, body.answers, body.time_taken)
    quiz = engine.get_tenant_quiz(db, ctx, quiz_id)
    return engine.submission_to_dict(submission, quiz, db.get(User, ctx.user_id))
