
from dataclasses import dataclass
from fastapi import Request, Depends
from sqlalchemy.orm import Session
from jose import JWTError
from schoolsafe.db.session import SessionLocal
from schoolsafe.errors import Unauthorized, Forbidden
from schoolsafe.utils.security import decode_token
from schoolsafe.models.user import User

COOKIE_NAME = "ss_jwt"


@dataclass(frozen=True)
class RequestContext:
    """Caller identity threaded explicitly through every service call."""
    user_id: int
    role: str
    tenant_id: int
    student_id: int | None = None


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def get_token(request: Request) -> str | None:
    auth = request.headers.get("Authorization")
    if auth and auth.startswith("Bearer "):
        return auth.split(" ", 1)[1].strip()
    return request.cookies.get(COOKIE_NAME)

def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    token = get_token(request)
    if not token:
        raise Unauthorized("Not authorized, no token")

    try:
        payload = decode_token(token)
        user_id = payload.get("sub")
        if user_id is None:
            raise Unauthorized("Not authorized, token failed")
    except JWTError:
        raise Unauthorized("Not authorized, token failed")

    user = db.get(User, int(user_id))
    if user is None or not user.is_active:
        raise Unauthorized("User not found")

    return user

def get_context(user: User = Depends(get_current_user)) -> RequestContext:
    return RequestContext(
        user_id=user.id,
        role=user.role,
        tenant_id=user.tenant_id,
        student_id=user.student_id,
    )

def require_roles(*roles: str):
    def _check(ctx: RequestContext = Depends(get_context)) -> RequestContext:
        if ctx.role not in roles:
            raise Forbidden(f"User role {ctx.role} is not authorized to access this route")
        return ctx
    return _check
