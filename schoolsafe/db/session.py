from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from schoolsafe.config import settings
import logging

logger = logging.getLogger(__name__)

DEFAULT_URL = "sqlite:///./schoolsafe.db"

class Base(DeclarativeBase):
    pass

def normalize_url(url: str | None) -> str:
    """Point bare postgres URLs (as hosting providers hand them out) at psycopg 3."""
    url = url or DEFAULT_URL
    for scheme in ("postgres://", "postgresql://"):
        if url.startswith(scheme):
            return "postgresql+psycopg://" + url[len(scheme):]
    return url

def make_engine(url: str):
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args, pool_pre_ping=True, future=True)

engine = make_engine(normalize_url(settings.database_url))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)

def import_models():
    # registers every table on Base.metadata
    from schoolsafe.models import tenant, user, quiz, resource, drill, alert, message  # noqa: F401

def init_db(bind=None):
    bind = bind or engine
    import_models()
    Base.metadata.create_all(bind=bind)
    logger.info("database schema ready (%s)", bind.url.drivername)
