
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from schoolsafe.auth.deps import get_db, get_context, RequestContext
from schoolsafe.errors import NotFound, ValidationError
from schoolsafe.models.tenant import Tenant
from schoolsafe.models.user import User
from schoolsafe.progress.aggregator import check_student_visibility
from schoolsafe.quizzes.engine import student_submissions
from schoolsafe.resources.service import student_completions
from schoolsafe.schemas.quiz import SubmissionOut
from schoolsafe.schemas.resource import CompletionOut
from schoolsafe.schemas.tenant import EmergencyContact
from schoolsafe.schemas.user import UserOut, UserBrief, ContactOut
from schoolsafe.users.routes import get_tenant_user

router = APIRouter(prefix="/students", tags=["students"])

def _visible_student(db: Session, ctx: RequestContext, student_id: int) -> User:
    check_student_visibility(ctx, student_id)
    return get_tenant_user(db, ctx.tenant_id, student_id, role="student")

@router.get("")
def students_for_registration(tenant_id: int | None = Query(None, alias="tenantId"), db: Session = Depends(get_db)):
    """Public: parents pick their child from this list while registering."""
    if tenant_id is None:
        raise ValidationError("Tenant ID is required")
    tenant = db.get(Tenant, tenant_id)
    if not tenant or not tenant.is_active:
        raise NotFound("School/Institute not found")
    students = (
        db.query(User)
        .filter(User.tenant_id == tenant.id, User.role == "student", User.is_active.is_(True))
        .order_by(User.first_name, User.last_name, User.id)
        .all()
    )
    data = [UserBrief.model_validate(s).model_dump(by_alias=True) for s in students]
    return {"success": True, "data": data, "count": len(data), "school": tenant.name}

@router.get("/{student_id}", response_model=UserOut)
def student_details(student_id: int, db: Session = Depends(get_db), ctx: RequestContext = Depends(get_context)):
    return _visible_student(db, ctx, student_id)

@router.get("/{student_id}/parents", response_model=list[ContactOut])
def student_parents(student_id: int, db: Session = Depends(get_db), ctx: RequestContext = Depends(get_context)):
    student = _visible_student(db, ctx, student_id)
    return (
        db.query(User)
        .filter(User.student_id == student.id, User.role == "parent", User.is_active.is_(True))
        .order_by(User.first_name, User.id)
        .all()
    )

@router.get("/{student_id}/quiz-submissions", response_model=list[SubmissionOut])
def student_quiz_submissions(student_id: int, db: Session = Depends(get_db), ctx: RequestContext = Depends(get_context)):
    student = _visible_student(db, ctx, student_id)
    return student_submissions(db, student.id)

@router.get("/{student_id}/completed-resources", response_model=list[CompletionOut])
def student_completed_resources(student_id: int, db: Session = Depends(get_db), ctx: RequestContext = Depends(get_context)):
    student = _visible_student(db, ctx, student_id)
    return student_completions(db, student.id)

@router.get("/{student_id}/emergency-contacts", response_model=list[EmergencyContact])
def student_emergency_contacts(student_id: int, db: Session = Depends(get_db), ctx: RequestContext = Depends(get_context)):
    _visible_student(db, ctx, student_id)
    tenant = db.get(Tenant, ctx.tenant_id)
    return tenant.emergency_contacts or []
