
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from schoolsafe.auth.deps import get_db, get_context, require_roles, RequestContext
from schoolsafe.errors import NotFound, ValidationError
from schoolsafe.models.drill import Drill, DRILL_STATUSES
from schoolsafe.models.user import User
from schoolsafe.schemas.drill import DrillCreate, DrillStatusIn, DrillOut

router = APIRouter(prefix="/drills", tags=["drills"])

def _briefs(db: Session, user_ids: list[int]) -> dict[int, User]:
    if not user_ids:
        return {}
    return {u.id: u for u in db.query(User).filter(User.id.in_(user_ids)).all()}

def drills_out(db: Session, drills: list[Drill]) -> list[dict]:
    ids = {d.created_by for d in drills}
    for d in drills:
        ids.update(d.participants or [])
    users = _briefs(db, list(ids))
    out = []
    for d in drills:
        out.append({
            "id": d.id,
            "title": d.title,
            "description": d.description,
            "scheduled_date": d.scheduled_date,
            "tenant_id": d.tenant_id,
            "created_by": d.created_by,
            "creator": users.get(d.created_by),
            "status": d.status,
            "participants": [users[p] for p in (d.participants or []) if p in users],
            "feedback": d.feedback,
            "created_at": d.created_at,
        })
    return out

def _get_drill(db: Session, ctx: RequestContext, drill_id: int) -> Drill:
    drill = db.query(Drill).filter(Drill.id == drill_id, Drill.tenant_id == ctx.tenant_id).first()
    if not drill:
        raise NotFound("Drill not found")
    return drill

def tenant_drills(db: Session, tenant_id: int, created_by: int | None = None) -> list[Drill]:
    query = db.query(Drill).filter(Drill.tenant_id == tenant_id)
    if created_by is not None:
        query = query.filter(Drill.created_by == created_by)
    return query.order_by(Drill.scheduled_date.asc(), Drill.id.asc()).all()

@router.get("", response_model=list[DrillOut])
def list_drills(db: Session = Depends(get_db), ctx: RequestContext = Depends(get_context)):
    return drills_out(db, tenant_drills(db, ctx.tenant_id))

@router.post("", response_model=DrillOut, status_code=status.HTTP_201_CREATED)
def create_drill(body: DrillCreate, db: Session = Depends(get_db), ctx: RequestContext = Depends(require_roles("teacher"))):
    participants = list(dict.fromkeys(body.participants))
    if participants:
        found = db.query(User.id).filter(User.id.in_(participants), User.tenant_id == ctx.tenant_id).count()
        if found != len(participants):
            raise NotFound("Participant not found")
    drill = Drill(
        title=body.title,
        description=body.description,
        scheduled_date=body.scheduled_date,
        participants=participants,
        tenant_id=ctx.tenant_id,
        created_by=ctx.user_id,
        status="PENDING",
    )
    db.add(drill); db.commit(); db.refresh(drill)
    return drills_out(db, [drill])[0]

@router.put("/{drill_id}/status", response_model=DrillOut)
def update_drill_status(drill_id: int, body: DrillStatusIn, db: Session = Depends(get_db), ctx: RequestContext = Depends(require_roles("teacher"))):
    if body.status not in DRILL_STATUSES:
        raise ValidationError(f"Invalid status. Allowed values: {', '.join(DRILL_STATUSES)}")
    drill = _get_drill(db, ctx, drill_id)
    drill.status = body.status
    drill.feedback = body.feedback
    db.commit(); db.refresh(drill)
    return drills_out(db, [drill])[0]

@router.delete("/{drill_id}")
def delete_drill(drill_id: int, db: Session = Depends(get_db), ctx: RequestContext = Depends(require_roles("teacher"))):
    drill = _get_drill(db, ctx, drill_id)
    db.delete(drill); db.commit()
    return {"success": True, "message": "Drill deleted successfully"}
