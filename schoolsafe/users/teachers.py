
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from schoolsafe.auth.deps import get_db, require_roles, RequestContext
from schoolsafe.drills.routes import drills_out, tenant_drills
from schoolsafe.models.quiz import Quiz
from schoolsafe.models.drill import Drill
from schoolsafe.progress.aggregator import active_students
from schoolsafe.quizzes.engine import list_quizzes
from schoolsafe.schemas.drill import DrillOut
from schoolsafe.schemas.progress import TeacherDashboardOut
from schoolsafe.schemas.quiz import QuizOut
from schoolsafe.schemas.user import UserBrief
from schoolsafe.users.routes import get_tenant_user

router = APIRouter(prefix="/teachers", tags=["teachers"])

def _teacher(db: Session, ctx: RequestContext, teacher_id: int):
    return get_tenant_user(db, ctx.tenant_id, teacher_id, role="teacher")

@router.get("/{teacher_id}/quizzes", response_model=list[QuizOut])
def teacher_quizzes(teacher_id: int, db: Session = Depends(get_db), ctx: RequestContext = Depends(require_roles("teacher"))):
    teacher = _teacher(db, ctx, teacher_id)
    return list_quizzes(db, ctx, created_by=teacher.id)

@router.get("/{teacher_id}/drills", response_model=list[DrillOut])
def teacher_drills(teacher_id: int, db: Session = Depends(get_db), ctx: RequestContext = Depends(require_roles("teacher"))):
    teacher = _teacher(db, ctx, teacher_id)
    return drills_out(db, tenant_drills(db, ctx.tenant_id, created_by=teacher.id))

@router.get("/{teacher_id}/students", response_model=list[UserBrief])
def teacher_students(teacher_id: int, db: Session = Depends(get_db), ctx: RequestContext = Depends(require_roles("teacher"))):
    _teacher(db, ctx, teacher_id)
    return active_students(db, ctx.tenant_id)

@router.get("/{teacher_id}/dashboard", response_model=TeacherDashboardOut)
def teacher_dashboard(teacher_id: int, db: Session = Depends(get_db), ctx: RequestContext = Depends(require_roles("teacher"))):
    teacher = _teacher(db, ctx, teacher_id)
    return {
        "total_quizzes": db.query(Quiz).filter(Quiz.created_by == teacher.id, Quiz.tenant_id == ctx.tenant_id).count(),
        "total_drills": db.query(Drill).filter(Drill.created_by == teacher.id, Drill.tenant_id == ctx.tenant_id).count(),
        "total_students": len(active_students(db, ctx.tenant_id)),
    }
