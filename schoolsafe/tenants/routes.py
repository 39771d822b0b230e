
import logging
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from schoolsafe.auth.deps import get_db, get_context, require_roles, RequestContext
from schoolsafe.auth.routes import set_auth_cookie
from schoolsafe.errors import Conflict, NotFound
from schoolsafe.models.tenant import Tenant
from schoolsafe.models.user import User
from schoolsafe.schemas.tenant import (
    TenantRegisterIn, TenantRegisterOut, TenantRegisterData, TenantUpdate, TenantOut, SchoolOut,
)
from schoolsafe.schemas.user import UserOut
from schoolsafe.utils.security import hash_password, create_access_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tenants", tags=["tenants"])

def _own_tenant(db: Session, ctx: RequestContext, tenant_id: int) -> Tenant:
    # other schools are reported as missing, not forbidden
    tenant = db.get(Tenant, tenant_id) if tenant_id == ctx.tenant_id else None
    if not tenant:
        raise NotFound("Tenant not found")
    return tenant

@router.post("/register", response_model=TenantRegisterOut, status_code=status.HTTP_201_CREATED)
def register_tenant(body: TenantRegisterIn, response: Response, db: Session = Depends(get_db)):
    email = body.email.lower()
    if db.query(User).filter(User.email == email).first():
        raise Conflict("User already exists with this email")
    name = body.school_name.strip()
    if db.query(Tenant).filter(Tenant.name == name).first():
        raise Conflict("School/Institute already exists")

    tenant = Tenant(name=name, contact_email=email, is_active=True)
    db.add(tenant)
    try:
        db.flush()
        director = User(
            first_name=body.first_name.strip(),
            last_name=body.last_name.strip(),
            email=email,
            password_hash=hash_password(body.password),
            role="director",
            tenant_id=tenant.id,
            grade=body.grade or "",
            school=name,
        )
        db.add(director)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("School or user already exists")
    db.refresh(tenant); db.refresh(director)
    logger.info("tenant %s registered with director %s", tenant.id, director.id)

    token = create_access_token(str(director.id))
    set_auth_cookie(response, token)
    return TenantRegisterOut(
        message="School registered successfully",
        data=TenantRegisterData(
            tenant=TenantOut.model_validate(tenant),
            user=UserOut.model_validate(director),
            token=token,
        ),
    )

@router.get("/schools/list")
def list_schools(db: Session = Depends(get_db)):
    schools = db.query(Tenant).filter(Tenant.is_active.is_(True)).order_by(Tenant.name.asc()).all()
    return {"success": True, "data": [SchoolOut.model_validate(s).model_dump(by_alias=True) for s in schools]}

@router.get("/{tenant_id}", response_model=TenantOut)
def get_tenant(tenant_id: int, db: Session = Depends(get_db), ctx: RequestContext = Depends(get_context)):
    return _own_tenant(db, ctx, tenant_id)

@router.put("/{tenant_id}", response_model=TenantOut)
def update_tenant(tenant_id: int, body: TenantUpdate, db: Session = Depends(get_db), ctx: RequestContext = Depends(require_roles("director"))):
    tenant = _own_tenant(db, ctx, tenant_id)
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    if "name" in changes:
        changes["name"] = changes["name"].strip()
        clash = db.query(Tenant).filter(Tenant.name == changes["name"], Tenant.id != tenant.id).first()
        if clash:
            raise Conflict("School/Institute already exists")
    for field, value in changes.items():
        setattr(tenant, field, value)
    db.commit(); db.refresh(tenant)
    return tenant

@router.delete("/{tenant_id}")
def delete_tenant(tenant_id: int, db: Session = Depends(get_db), ctx: RequestContext = Depends(require_roles("director"))):
    tenant = _own_tenant(db, ctx, tenant_id)
    # tenants are deactivated so their records stay referentially intact
    tenant.is_active = False
    db.query(User).filter(User.tenant_id == tenant.id).update({User.is_active: False}, synchronize_session=False)
    db.commit()
    logger.info("tenant %s deactivated by %s", tenant.id, ctx.user_id)
    return {"success": True, "message": "Tenant deleted successfully"}
