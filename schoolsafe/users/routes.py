
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from schoolsafe.auth.deps import get_db, get_context, RequestContext
from schoolsafe.errors import NotFound, ValidationError
from schoolsafe.models.user import User, ROLES
from schoolsafe.schemas.user import UserOut

router = APIRouter(prefix="/users", tags=["users"])

def get_tenant_user(db: Session, tenant_id: int, user_id: int, role: str | None = None) -> User:
    query = db.query(User).filter(User.id == user_id, User.tenant_id == tenant_id)
    if role is not None:
        query = query.filter(User.role == role)
    user = query.first()
    if not user:
        raise NotFound(f"{(role or 'user').capitalize()} not found")
    return user

@router.get("", response_model=list[UserOut])
def users_by_role(role: str | None = Query(None), db: Session = Depends(get_db), ctx: RequestContext = Depends(get_context)):
    if not role:
        raise ValidationError("Role parameter is required")
    if role not in ROLES:
        raise ValidationError(f"Unknown role {role}")
    return (
        db.query(User)
        .filter(User.tenant_id == ctx.tenant_id, User.role == role, User.is_active.is_(True))
        .order_by(User.first_name, User.last_name, User.id)
        .all()
    )

@router.get("/{user_id}", response_model=UserOut)
def user_by_id(user_id: int, db: Session = Depends(get_db), ctx: RequestContext = Depends(get_context)):
    return get_tenant_user(db, ctx.tenant_id, user_id)
