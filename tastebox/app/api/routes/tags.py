from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tastebox.app.api.deps import get_current_user, get_db_session
from tastebox.app.schemas.auth import CurrentUser
from tastebox.app.services import recipes_service

router = APIRouter(tags=["tags"])


@router.get("/tags", response_model=list[str])
def list_tags(
    db: Session = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    return [tag.name for tag in recipes_service.list_tags_for_user(db, current_user.id)]
