import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from tastebox.app.api.deps import get_current_user, get_db_session
from tastebox.app.core.security import create_access_token
from tastebox.app.schemas.auth import AuthResponse, CurrentUser, LoginRequest, RegisterRequest, UserRead
from tastebox.app.services import users_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _auth_response(user) -> AuthResponse:
    return AuthResponse(
        user=UserRead.model_validate(user),
        token=create_access_token(user.id, user.email),
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, db: Session = Depends(get_db_session)):
    user = users_service.register_user(db, payload)
    return _auth_response(user)


@router.post("/login", response_model=AuthResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db_session)):
    user = users_service.authenticate(db, payload.email, payload.password)
    logger.info("User %s logged in", user.id)
    return _auth_response(user)


@router.get("/me", response_model=UserRead)
def me(
    db: Session = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    return users_service.get_user(db, current_user.id)
