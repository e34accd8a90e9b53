import logging

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session

from tastebox.app.api.deps import get_current_user, get_db_session, get_storage_provider
from tastebox.app.core.config import get_settings
from tastebox.app.core.errors import ValidationError
from tastebox.app.schemas.auth import CurrentUser, UserRead
from tastebox.app.schemas.user import ProfileUpdate, VoiceSettings, VoiceSettingsUpdate
from tastebox.app.services import users_service
from tastebox.app.services.storage.base import StorageProvider

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserRead)
def get_profile(
    db: Session = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    return users_service.get_user(db, current_user.id)


@router.put("/me", response_model=UserRead)
def update_profile(
    payload: ProfileUpdate,
    db: Session = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    return users_service.update_profile(db, current_user.id, payload)


@router.post("/me/photo", response_model=UserRead)
def upload_profile_photo(
    photo: UploadFile = File(...),
    db: Session = Depends(get_db_session),
    storage: StorageProvider = Depends(get_storage_provider),
    current_user: CurrentUser = Depends(get_current_user),
):
    settings = get_settings()
    if not (photo.content_type or "").startswith("image/"):
        raise ValidationError("Only image files are allowed", [{"field": "photo", "message": "Not an image"}])

    data = photo.file.read()
    if not data:
        raise ValidationError("Empty file", [{"field": "photo", "message": "Empty file"}])
    if len(data) > settings.profile_photo_max_bytes:
        raise ValidationError(
            "File too large. Maximum size is 5MB",
            [{"field": "photo", "message": f"Exceeds {settings.profile_photo_max_bytes} bytes"}],
        )

    url = storage.save_image(photo)
    previous = users_service.set_profile_photo(db, current_user.id, url)
    if previous:
        storage.delete_image(previous)
        logger.info("Replaced profile photo for user %s", current_user.id)
    return users_service.get_user(db, current_user.id)


@router.get("/me/voice-settings", response_model=VoiceSettings)
def get_voice_settings(
    db: Session = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    return users_service.get_voice_settings(db, current_user.id)


@router.put("/me/voice-settings", response_model=VoiceSettings)
def update_voice_settings(
    payload: VoiceSettingsUpdate,
    db: Session = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    return users_service.update_voice_settings(db, current_user.id, payload)
