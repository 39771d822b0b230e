
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from schoolsafe.auth.deps import get_db, get_context, require_roles, RequestContext
from schoolsafe.schemas.resource import ResourceCreate, ResourceUpdate, ResourceOut, CompleteIn, CompletionOut
from schoolsafe.resources import service

router = APIRouter(prefix="/resources", tags=["resources"])

@router.get("", response_model=list[ResourceOut])
def list_resources(db: Session = Depends(get_db), ctx: RequestContext = Depends(get_context)):
    return service.list_resources(db, ctx)

@router.post("", response_model=ResourceOut, status_code=status.HTTP_201_CREATED)
def create_resource(body: ResourceCreate, db: Session = Depends(get_db), ctx: RequestContext = Depends(require_roles("director"))):
    return service.create_resource(db, ctx, body)

@router.get("/completions", response_model=list[CompletionOut])
def my_completions(db: Session = Depends(get_db), ctx: RequestContext = Depends(get_context)):
    return service.student_completions(db, ctx.user_id)

@router.put("/{resource_id}", response_model=ResourceOut)
def update_resource(resource_id: int, body: ResourceUpdate, db: Session = Depends(get_db), ctx: RequestContext = Depends(require_roles("director"))):
    return service.update_resource(db, ctx, resource_id, body)

@router.post("/{resource_id}/complete", response_model=CompletionOut, status_code=status.HTTP_201_CREATED)
def complete_resource(resource_id: int, body: CompleteIn | None = None, db: Session = Depends(get_db), ctx: RequestContext = Depends(require_roles("student"))):
    time_spent = body.time_spent if body else None
    return service.complete_resource(db, ctx, resource_id, time_spent)

@router.delete("/{resource_id}")
def delete_resource(resource_id: int, db: Session = Depends(get_db), ctx: RequestContext = Depends(require_roles("director"))):
    service.delete_resource(db, ctx, resource_id)
    return {"success": True, "message": "Resource deleted successfully"}
