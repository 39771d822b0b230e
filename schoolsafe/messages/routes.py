
from datetime import datetime
from typing import Literal
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import and_, or_
from sqlalchemy.orm import Session, aliased
from schoolsafe.auth.deps import get_db, get_context, RequestContext
from schoolsafe.errors import Forbidden, NotFound
from schoolsafe.models.message import Message
from schoolsafe.models.user import User
from schoolsafe.schemas.message import MessageCreate, MessageOut, UnreadCountOut

router = APIRouter(prefix="/messages", tags=["messages"])

# who may start a conversation with whom
ALLOWED_PAIRS = {("teacher", "student"), ("student", "teacher")}

Sender = aliased(User)
Receiver = aliased(User)

def _hydrated(db: Session):
    return (
        db.query(Message, Sender, Receiver)
        .outerjoin(Sender, Sender.id == Message.sender_id)
        .outerjoin(Receiver, Receiver.id == Message.receiver_id)
    )

def message_out(message: Message, sender: User | None, receiver: User | None) -> dict:
    return {
        "id": message.id,
        "sender_id": message.sender_id,
        "receiver_id": message.receiver_id,
        "sender": sender,
        "receiver": receiver,
        "subject": message.subject,
        "message": message.message,
        "tenant_id": message.tenant_id,
        "is_read": message.is_read,
        "read_at": message.read_at,
        "created_at": message.created_at,
    }

def _one(db: Session, message_id: int) -> dict:
    row = _hydrated(db).filter(Message.id == message_id).first()
    return message_out(*row)

@router.post("", response_model=MessageOut, status_code=status.HTTP_201_CREATED)
def send_message(body: MessageCreate, db: Session = Depends(get_db), ctx: RequestContext = Depends(get_context)):
    receiver = db.query(User).filter(User.id == body.receiver_id, User.tenant_id == ctx.tenant_id).first()
    if not receiver:
        raise NotFound("Receiver not found")
    if (ctx.role, receiver.role) not in ALLOWED_PAIRS:
        raise Forbidden("You can only message teachers if you are a student, or students if you are a teacher")

    msg = Message(
        sender_id=ctx.user_id,
        receiver_id=receiver.id,
        subject=body.subject.strip(),
        message=body.message.strip(),
        tenant_id=ctx.tenant_id,
    )
    db.add(msg); db.commit(); db.refresh(msg)
    return _one(db, msg.id)

@router.get("", response_model=list[MessageOut])
def list_messages(
    type: Literal["sent", "received"] = Query("received"),
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_context),
):
    query = _hydrated(db).filter(Message.tenant_id == ctx.tenant_id)
    if type == "sent":
        query = query.filter(Message.sender_id == ctx.user_id)
    else:
        query = query.filter(Message.receiver_id == ctx.user_id)
    rows = query.order_by(Message.created_at.desc(), Message.id.desc()).all()
    return [message_out(*row) for row in rows]

@router.get("/unread-count", response_model=UnreadCountOut)
def unread_count(db: Session = Depends(get_db), ctx: RequestContext = Depends(get_context)):
    count = db.query(Message).filter(
        Message.receiver_id == ctx.user_id,
        Message.tenant_id == ctx.tenant_id,
        Message.is_read.is_(False),
    ).count()
    return {"unread_count": count}

@router.get("/conversation/{user_id}", response_model=list[MessageOut])
def conversation(user_id: int, db: Session = Depends(get_db), ctx: RequestContext = Depends(get_context)):
    rows = (
        _hydrated(db)
        .filter(
            Message.tenant_id == ctx.tenant_id,
            or_(
                and_(Message.sender_id == ctx.user_id, Message.receiver_id == user_id),
                and_(Message.sender_id == user_id, Message.receiver_id == ctx.user_id),
            ),
        )
        .order_by(Message.created_at.asc(), Message.id.asc())
        .all()
    )
    return [message_out(*row) for row in rows]

@router.put("/{message_id}/read", response_model=MessageOut)
def mark_as_read(message_id: int, db: Session = Depends(get_db), ctx: RequestContext = Depends(get_context)):
    msg = db.query(Message).filter(
        Message.id == message_id,
        Message.receiver_id == ctx.user_id,
        Message.tenant_id == ctx.tenant_id,
    ).first()
    if not msg:
        raise NotFound("Message not found")
    if not msg.is_read:
        msg.is_read = True
        msg.read_at = datetime.utcnow()
        db.commit()
    return _one(db, msg.id)
