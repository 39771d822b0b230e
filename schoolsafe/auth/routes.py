
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session
from schoolsafe.auth.deps import get_db, get_context, RequestContext, COOKIE_NAME
from schoolsafe.schemas.auth import RegisterIn, LoginIn, AuthOut, AuthData
from schoolsafe.schemas.user import UserOut, UserBrief
from schoolsafe.auth.service import register_user, login_user, get_profile
from schoolsafe.utils.security import create_access_token

router = APIRouter(prefix="/auth", tags=["auth"])

def set_auth_cookie(response: Response, token: str):
    response.set_cookie(
        key=COOKIE_NAME,
        value=token,
        httponly=True,
        samesite="Lax",
        secure=False,
        path="/",
        max_age=60 * 60 * 8,
    )

def _auth_data(user, token, student=None) -> AuthData:
    return AuthData(
        user=UserOut.model_validate(user),
        token=token,
        student=UserBrief.model_validate(student) if student else None,
    )

@router.post("/register", response_model=AuthOut, status_code=status.HTTP_201_CREATED)
def register(body: RegisterIn, response: Response, db: Session = Depends(get_db)):
    user = register_user(db, body)
    token = create_access_token(str(user.id))
    set_auth_cookie(response, token)
    _, student = get_profile(db, user.id)
    return AuthOut(message="User registered successfully", data=_auth_data(user, token, student))

@router.post("/login", response_model=AuthOut)
def login(body: LoginIn, response: Response, db: Session = Depends(get_db)):
    user, token = login_user(db, body.email, body.password)
    set_auth_cookie(response, token)
    _, student = get_profile(db, user.id)
    return AuthOut(message="Login successful", data=_auth_data(user, token, student))

@router.post("/logout")
def logout(response: Response):
    response.delete_cookie(COOKIE_NAME, path="/")
    return {"success": True}

@router.get("/profile", response_model=UserOut)
@router.get("/me", response_model=UserOut)
def profile(db: Session = Depends(get_db), ctx: RequestContext = Depends(get_context)):
    user, _ = get_profile(db, ctx.user_id)
    return user
