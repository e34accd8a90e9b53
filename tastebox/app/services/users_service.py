import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from tastebox.app.core.errors import AuthError, NotFoundError, ValidationError
from tastebox.app.core.security import hash_password, verify_password
from tastebox.app.db import models
from tastebox.app.schemas.auth import RegisterRequest
from tastebox.app.schemas.user import ProfileUpdate, VoiceSettings, VoiceSettingsUpdate

logger = logging.getLogger(__name__)


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user_by_email(db: Session, email: str) -> Optional[models.User]:
    stmt = select(models.User).where(func.lower(models.User.email) == _normalize_email(email))
    return db.scalars(stmt).first()


def get_user(db: Session, user_id: str) -> models.User:
    user = db.get(models.User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def register_user(db: Session, data: RegisterRequest) -> models.User:
    if get_user_by_email(db, data.email):
        raise ValidationError(
            "User already exists with this email",
            [{"field": "email", "message": "User already exists with this email"}],
        )
    user = models.User(
        email=_normalize_email(data.email),
        name=data.name,
        password_hash=hash_password(data.password),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s", user.id)
    return user


def authenticate(db: Session, email: str, password: str) -> models.User:
    user = get_user_by_email(db, email)
    # Same error for unknown email and wrong password
    if user is None or not verify_password(password, user.password_hash):
        raise AuthError("Invalid credentials")
    return user


def update_profile(db: Session, user_id: str, data: ProfileUpdate) -> models.User:
    user = get_user(db, user_id)
    if data.name is not None:
        user.name = data.name
    if data.alias is not None:
        user.alias = data.alias.strip() or None
    db.commit()
    db.refresh(user)
    return user


def set_profile_photo(db: Session, user_id: str, photo_url: str) -> Optional[str]:
    """Record a new profile photo and return the URL of the one it replaced."""
    user = get_user(db, user_id)
    previous = user.profile_photo
    user.profile_photo = photo_url
    db.commit()
    db.refresh(user)
    return previous if previous != photo_url else None


def get_voice_settings(db: Session, user_id: str) -> VoiceSettings:
    user = get_user(db, user_id)
    stored = user.voice_settings or {}
    # Stored blobs are parsed, not trusted; unknown or invalid keys fall back to defaults
    merged = VoiceSettings().model_dump()
    for key, value in stored.items():
        if key in merged:
            merged[key] = value
    try:
        return VoiceSettings.model_validate(merged)
    except ValueError:
        logger.warning("Discarding invalid stored voice settings for user %s", user_id)
        return VoiceSettings()


def update_voice_settings(db: Session, user_id: str, data: VoiceSettingsUpdate) -> VoiceSettings:
    current = get_voice_settings(db, user_id)
    updated = current.model_copy(update=data.model_dump(exclude_none=True))
    user = get_user(db, user_id)
    user.voice_settings = updated.model_dump()
    db.commit()
    return updated
