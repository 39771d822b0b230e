import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from schoolsafe.middleware.ratelimit import RateLimitMiddleware, make_key_func
from schoolsafe.config import settings
from schoolsafe.errors import AppError
from schoolsafe.db.session import SessionLocal, init_db
from schoolsafe.auth.routes import router as auth_router
from schoolsafe.tenants.routes import router as tenants_router
from schoolsafe.users.routes import router as users_router
from schoolsafe.users.students import router as students_router
from schoolsafe.users.teachers import router as teachers_router
from schoolsafe.users.parents import router as parents_router
from schoolsafe.quizzes.routes import router as quizzes_router
from schoolsafe.resources.routes import router as resources_router
from schoolsafe.progress.routes import router as progress_router
from schoolsafe.director.routes import router as director_router
from schoolsafe.drills.routes import router as drills_router
from schoolsafe.alerts.routes import router as alerts_router
from schoolsafe.messages.routes import router as messages_router

logger = logging.getLogger(__name__)

ROUTERS = (
    auth_router,
    tenants_router,
    users_router,
    students_router,
    teachers_router,
    parents_router,
    quizzes_router,
    resources_router,
    progress_router,
    director_router,
    drills_router,
    alerts_router,
    messages_router,
)

def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

def _envelope(status_code: int, message: str, errors=None) -> JSONResponse:
    content = {"success": False, "message": message}
    if errors:
        content["errors"] = errors
    return JSONResponse(status_code=status_code, content=content)

def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return _envelope(exc.status_code, exc.message, exc.errors)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = [
            {"field": ".".join(str(p) for p in err["loc"] if p != "body"), "message": err["msg"]}
            for err in exc.errors()
        ]
        return _envelope(400, "Validation failed", errors)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return _envelope(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("unhandled error on %s %s", request.method, request.url.path)
        message = "Internal server error" if settings.is_production else str(exc)
        return _envelope(500, message)

def database_ok() -> bool:
    try:
        with SessionLocal() as db:
            db.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.error("database check failed: %s", e)
        return False

def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title=settings.app_name)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(
        RateLimitMiddleware,
        window_seconds=settings.rate_limit_window_seconds,
        max_calls=settings.rate_limit_max_calls,
        key_func=make_key_func(settings.secret_key),
        include_path_prefixes=("/api/auth/login", "/api/auth/register", "/api/tenants/register"),
    )

    register_error_handlers(app)
    for router in ROUTERS:
        app.include_router(router, prefix="/api")

    @app.on_event("startup")
    def on_startup():
        init_db()

    @app.get("/", tags=["root"])
    def root():
        return {"name": settings.app_name, "env": settings.app_env}

    @app.get("/api/health", tags=["root"])
    def health():
        return {
            "success": True,
            "name": settings.app_name,
            "env": settings.app_env,
            "database": "connected" if database_ok() else "unavailable",
        }

    return app

app = create_app()
