import logging
from datetime import datetime
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from schoolsafe.auth.deps import RequestContext
from schoolsafe.errors import Conflict, NotFound
from schoolsafe.models.quiz import Quiz
from schoolsafe.models.resource import Resource, ResourceCompletion
from schoolsafe.models.user import User
from schoolsafe.schemas.resource import ResourceCreate, ResourceUpdate

logger = logging.getLogger(__name__)

def _brief(user: User | None) -> dict | None:
    if user is None:
        return None
    return {"id": user.id, "first_name": user.first_name, "last_name": user.last_name}

def resource_to_dict(resource: Resource, creator: User | None = None) -> dict:
    return {
        "id": resource.id,
        "title": resource.title,
        "description": resource.description,
        "type": resource.type,
        "content": resource.content,
        "tenant_id": resource.tenant_id,
        "created_by": resource.created_by,
        "creator": _brief(creator),
        "tags": resource.tags or [],
        "is_public": resource.is_public,
        "thumbnail": resource.thumbnail,
        "duration": resource.duration,
        "created_at": resource.created_at,
    }

def completion_to_dict(completion: ResourceCompletion, resource: Resource | None = None) -> dict:
    return {
        "id": completion.id,
        "resource_id": completion.resource_id,
        "student_id": completion.student_id,
        "completed_at": completion.completed_at,
        "time_spent": completion.time_spent,
        "resource": resource_to_dict(resource) if resource is not None else None,
    }

def get_tenant_resource(db: Session, ctx: RequestContext, resource_id: int) -> Resource:
    resource = db.query(Resource).filter(
        Resource.id == resource_id, Resource.tenant_id == ctx.tenant_id
    ).first()
    if resource is None:
        raise NotFound("Resource not found or access denied")
    return resource

def list_resources(db: Session, ctx: RequestContext) -> list[dict]:
    rows = (
        db.query(Resource, User)
        .outerjoin(User, User.id == Resource.created_by)
        .filter(Resource.tenant_id == ctx.tenant_id)
        .order_by(Resource.created_at.desc(), Resource.id.desc())
        .all()
    )
    return [resource_to_dict(resource, creator) for resource, creator in rows]

def create_resource(db: Session, ctx: RequestContext, body: ResourceCreate) -> dict:
    resource = Resource(
        **body.model_dump(),
        tenant_id=ctx.tenant_id,
        created_by=ctx.user_id,
    )
    db.add(resource)
    db.commit()
    db.refresh(resource)
    logger.info("resource %s (%s) created by %s", resource.id, resource.type, ctx.user_id)
    return resource_to_dict(resource, db.get(User, ctx.user_id))

def update_resource(db: Session, ctx: RequestContext, resource_id: int, body: ResourceUpdate) -> dict:
    resource = get_tenant_resource(db, ctx, resource_id)
    for field, value in body.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(resource, field, value)
    db.commit()
    db.refresh(resource)
    return resource_to_dict(resource, db.get(User, resource.created_by))

def delete_resource(db: Session, ctx: RequestContext, resource_id: int) -> None:
    resource = get_tenant_resource(db, ctx, resource_id)
    removed = (
        db.query(ResourceCompletion)
        .filter(ResourceCompletion.resource_id == resource.id)
        .delete(synchronize_session=False)
    )
    # quizzes outlive the resource they were linked to
    db.query(Quiz).filter(Quiz.resource_id == resource.id).update(
        {Quiz.resource_id: None}, synchronize_session=False
    )
    db.delete(resource)
    db.commit()
    logger.info("resource %s deleted with %d completions", resource_id, removed)

def complete_resource(
    db: Session,
    ctx: RequestContext,
    resource_id: int,
    time_spent: int | None = None,
    completed_at: datetime | None = None,
) -> dict:
    resource = get_tenant_resource(db, ctx, resource_id)

    existing = db.query(ResourceCompletion).filter(
        ResourceCompletion.resource_id == resource.id,
        ResourceCompletion.student_id == ctx.user_id,
    ).first()
    if existing is not None:
        raise Conflict("Resource already completed")

    completion = ResourceCompletion(
        resource_id=resource.id,
        student_id=ctx.user_id,
        time_spent=time_spent,
        completed_at=completed_at or datetime.utcnow(),
    )
    db.add(completion)
    try:
        db.commit()
    except IntegrityError:
        # a concurrent request won the unique (resource, student) insert
        db.rollback()
        raise Conflict("Resource already completed")
    db.refresh(completion)
    logger.info("resource %s completed by student %s", resource.id, ctx.user_id)
    return completion_to_dict(completion, resource)

def student_completions(db: Session, student_id: int) -> list[dict]:
    rows = (
        db.query(ResourceCompletion, Resource)
        .join(Resource, Resource.id == ResourceCompletion.resource_id)
        .filter(ResourceCompletion.student_id == student_id)
        .order_by(ResourceCompletion.completed_at.desc(), ResourceCompletion.id.desc())
        .all()
    )
    return [completion_to_dict(completion, resource) for completion, resource in rows]
