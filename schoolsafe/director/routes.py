
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from schoolsafe.auth.deps import get_db, require_roles, RequestContext
from schoolsafe.schemas.progress import AnalyticsOut, DirectorStatsOut
from schoolsafe.progress import aggregator

router = APIRouter(prefix="/director", tags=["director"])

@router.get("/stats", response_model=DirectorStatsOut)
def stats(db: Session = Depends(get_db), ctx: RequestContext = Depends(require_roles("director"))):
    return aggregator.director_stats(db, ctx.tenant_id)

@router.get("/analytics", response_model=AnalyticsOut)
def analytics(
    time_range: str = Query("7days", alias="timeRange"),
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(require_roles("director")),
):
    window_days = aggregator.parse_time_range(time_range)
    return aggregator.compute_tenant_analytics(db, ctx.tenant_id, window_days)
