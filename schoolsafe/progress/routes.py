
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from schoolsafe.auth.deps import get_db, get_context, require_roles, RequestContext
from schoolsafe.schemas.progress import StudentProgressOut, ClassProgressEntry
from schoolsafe.progress import aggregator

router = APIRouter(prefix="/progress", tags=["progress"])

@router.get("/student/{student_id}", response_model=StudentProgressOut)
def student_progress(student_id: int, db: Session = Depends(get_db), ctx: RequestContext = Depends(get_context)):
    return aggregator.get_student_progress(db, ctx, student_id)

@router.get("/class", response_model=list[ClassProgressEntry])
def class_progress(db: Session = Depends(get_db), ctx: RequestContext = Depends(require_roles("teacher"))):
    return aggregator.compute_class_progress(db, ctx.tenant_id)
