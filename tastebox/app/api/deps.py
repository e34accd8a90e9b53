from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from tastebox.app.core.config import get_settings
from tastebox.app.core.errors import AuthError
from tastebox.app.core.security import decode_access_token
from tastebox.app.db import models
from tastebox.app.db.session import get_db
from tastebox.app.schemas.auth import CurrentUser
from tastebox.app.services.storage.base import StorageProvider
from tastebox.app.services.storage.local import LocalStorageProvider
from tastebox.app.services.storage.s3 import S3StorageProvider

AUTH_COOKIE_NAME = "authToken"

security = HTTPBearer(auto_error=False)


def get_db_session(db: Session = Depends(get_db)) -> Session:
    return db


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db_session),
) -> CurrentUser:
    token = credentials.credentials if credentials else request.cookies.get(AUTH_COOKIE_NAME)
    if not token:
        raise AuthError("Not authenticated")
    payload = decode_access_token(token)
    user = db.get(models.User, str(payload["sub"]))
    if user is None:
        raise AuthError("Invalid or expired token")
    return CurrentUser(id=user.id, email=user.email, name=user.name)


def get_storage_provider() -> StorageProvider:
    settings = get_settings()
    if settings.recipe_image_s3_bucket:
        return S3StorageProvider(settings)
    return LocalStorageProvider(settings.media_root, settings.media_url_prefix)
