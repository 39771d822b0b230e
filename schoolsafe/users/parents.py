
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from schoolsafe.auth.deps import get_db, require_roles, RequestContext
from schoolsafe.errors import Forbidden, NotFound
from schoolsafe.models.tenant import Tenant
from schoolsafe.models.user import User
from schoolsafe.progress.aggregator import get_student_progress
from schoolsafe.schemas.progress import StudentProgressOut

router = APIRouter(prefix="/parents", tags=["parents"])

def _self(ctx: RequestContext, parent_id: int) -> None:
    if parent_id != ctx.user_id:
        raise Forbidden("Access denied")

def _staff_contact(db: Session, tenant: Tenant, role: str) -> dict | None:
    staff = (
        db.query(User)
        .filter(User.tenant_id == tenant.id, User.role == role, User.is_active.is_(True))
        .order_by(User.id)
        .first()
    )
    if not staff:
        return None
    return {
        "firstName": staff.first_name,
        "lastName": staff.last_name,
        "email": staff.email,
        "phone": staff.phone or tenant.contact_phone,
    }

@router.get("/{parent_id}/student-progress", response_model=StudentProgressOut)
def child_progress(parent_id: int, db: Session = Depends(get_db), ctx: RequestContext = Depends(require_roles("parent"))):
    _self(ctx, parent_id)
    if ctx.student_id is None:
        raise NotFound("No student linked to parent account")
    return get_student_progress(db, ctx, ctx.student_id)

@router.get("/{parent_id}/emergency-contacts")
def emergency_contacts(parent_id: int, db: Session = Depends(get_db), ctx: RequestContext = Depends(require_roles("parent"))):
    _self(ctx, parent_id)
    tenant = db.get(Tenant, ctx.tenant_id)
    return {
        "emergencyContacts": tenant.emergency_contacts or [],
        "schoolInfo": {
            "name": tenant.name,
            "contactEmail": tenant.contact_email,
            "contactPhone": tenant.contact_phone,
            "address": tenant.address,
        },
        "director": _staff_contact(db, tenant, "director"),
        "teacher": _staff_contact(db, tenant, "teacher"),
    }
