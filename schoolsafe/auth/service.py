
import logging
from datetime import datetime
from sqlalchemy.orm import Session
from schoolsafe.errors import Conflict, NotFound, Unauthorized, ValidationError
from schoolsafe.models.tenant import Tenant
from schoolsafe.models.user import User
from schoolsafe.schemas.auth import RegisterIn
from schoolsafe.utils.security import hash_password, verify_password, create_access_token

logger = logging.getLogger(__name__)

def register_user(db: Session, body: RegisterIn) -> User:
    email = body.email.lower()
    if db.query(User).filter(User.email == email).first():
        raise Conflict("User already exists with this email")

    tenant = db.get(Tenant, body.tenant_id)
    if tenant is None or not tenant.is_active:
        raise ValidationError("School/Institute not found")

    if body.role == "parent":
        student = db.query(User).filter(
            User.id == body.student_id,
            User.role == "student",
            User.tenant_id == tenant.id,
            User.is_active.is_(True),
        ).first()
        if student is None:
            raise ValidationError("Selected student not found or does not belong to this school")

    user = User(
        first_name=body.first_name.strip(),
        last_name=body.last_name.strip(),
        email=email,
        password_hash=hash_password(body.password),
        role=body.role,
        tenant_id=tenant.id,
        student_id=body.student_id if body.role == "parent" else None,
        grade=body.grade.strip() if body.role == "student" else None,
        phone=body.phone,
        school=tenant.name,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("registered %s %s in tenant %s", user.role, user.id, tenant.id)
    return user

def login_user(db: Session, email: str, password: str) -> tuple[User, str]:
    user = db.query(User).filter(User.email == email.lower()).first()
    if not user or not user.is_active or not verify_password(password, user.password_hash):
        raise Unauthorized("Invalid email or password")
    user.last_active = datetime.utcnow()
    db.commit()
    return user, create_access_token(str(user.id))

def get_profile(db: Session, user_id: int) -> tuple[User, User | None]:
    user = db.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    student = db.get(User, user.student_id) if user.role == "parent" and user.student_id else None
    return user, student
