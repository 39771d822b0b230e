
import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from schoolsafe.auth.deps import get_db, get_context, require_roles, RequestContext
from schoolsafe.alerts import mailer
from schoolsafe.errors import NotFound, ValidationError
from schoolsafe.models.alert import Alert
from schoolsafe.models.user import User
from schoolsafe.schemas.alert import AlertCreate, AlertStatusIn, AlertEnvelope, AlertListOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/alerts", tags=["alerts"])

def alert_out(alert: Alert, sender: User | None) -> dict:
    return {
        "id": alert.id,
        "message": alert.message,
        "sender_id": alert.sender_id,
        "sender": sender,
        "tenant_id": alert.tenant_id,
        "target_roles": alert.target_roles,
        "emergency_level": alert.emergency_level,
        "status": alert.status,
        "dismissed": alert.dismissed,
        "sent": alert.sent,
        "created_at": alert.created_at,
    }

def _get_alert(db: Session, ctx: RequestContext, alert_id: int) -> Alert:
    alert = db.query(Alert).filter(Alert.id == alert_id, Alert.tenant_id == ctx.tenant_id).first()
    if not alert:
        raise NotFound("Alert not found or access denied")
    return alert

@router.post("", response_model=AlertEnvelope, status_code=status.HTTP_201_CREATED)
def send_alert(body: AlertCreate, db: Session = Depends(get_db), ctx: RequestContext = Depends(require_roles("director", "teacher", "student"))):
    if not body.message.strip() or not body.target_roles:
        raise ValidationError("Message and targetRoles are required")

    recipients = [
        email for (email,) in db.query(User.email).filter(
            User.tenant_id == ctx.tenant_id,
            User.role.in_(body.target_roles),
            User.is_active.is_(True),
        ).all()
    ]
    if not recipients:
        raise NotFound("No active users found for selected roles")

    alert = Alert(
        message=body.message.strip(),
        sender_id=ctx.user_id,
        tenant_id=ctx.tenant_id,
        target_roles=list(dict.fromkeys(body.target_roles)),
        emergency_level=body.emergency_level,
        sent=False,
        dismissed=False,
    )
    db.add(alert); db.commit(); db.refresh(alert)

    results = mailer.send_alert_email(recipients, alert.message, alert.emergency_level)
    delivered = sum(1 for r in results if r["success"])
    logger.info("alert %s delivered to %d/%d recipients", alert.id, delivered, len(results))

    alert.sent = True
    db.commit(); db.refresh(alert)
    return {"message": "Alert sent successfully", "alert": alert_out(alert, db.get(User, ctx.user_id))}

@router.get("", response_model=AlertListOut)
def list_alerts(db: Session = Depends(get_db), ctx: RequestContext = Depends(get_context)):
    rows = (
        db.query(Alert, User)
        .outerjoin(User, User.id == Alert.sender_id)
        .filter(Alert.tenant_id == ctx.tenant_id, Alert.dismissed.is_(False))
        .order_by(Alert.created_at.desc(), Alert.id.desc())
        .all()
    )
    alerts = [alert_out(alert, sender) for alert, sender in rows]
    return {"count": len(alerts), "alerts": alerts}

@router.put("/{alert_id}/status", response_model=AlertEnvelope)
def update_alert_status(alert_id: int, body: AlertStatusIn, db: Session = Depends(get_db), ctx: RequestContext = Depends(require_roles("director", "teacher"))):
    alert = _get_alert(db, ctx, alert_id)
    alert.status = body.status
    db.commit(); db.refresh(alert)
    return {"message": "Alert status updated successfully", "alert": alert_out(alert, db.get(User, alert.sender_id))}

@router.put("/{alert_id}/dismiss", response_model=AlertEnvelope)
def dismiss_alert(alert_id: int, db: Session = Depends(get_db), ctx: RequestContext = Depends(get_context)):
    alert = _get_alert(db, ctx, alert_id)
    alert.dismissed = True
    db.commit(); db.refresh(alert)
    return {"message": "Alert dismissed successfully", "alert": alert_out(alert, db.get(User, alert.sender_id))}
