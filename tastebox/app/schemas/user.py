from typing import Optional

from pydantic import BaseModel, Field, field_validator


class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    alias: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        value = value.strip()
        if len(value) < 2:
            raise ValueError("Name must have at least 2 characters")
        return value


class VoiceSettings(BaseModel):
    """Text-to-speech playback preferences used when reading recipes aloud."""

    rate: float = Field(0.9, ge=0.1, le=10.0)
    pitch: float = Field(1.0, ge=0.0, le=2.0)
    volume: float = Field(1.0, ge=0.0, le=1.0)
    voice: str = "default"
    language: str = "es-AR"


class VoiceSettingsUpdate(BaseModel):
    rate: Optional[float] = Field(None, ge=0.1, le=10.0)
    pitch: Optional[float] = Field(None, ge=0.0, le=2.0)
    volume: Optional[float] = Field(None, ge=0.0, le=1.0)
    voice: Optional[str] = Field(None, min_length=1)
    language: Optional[str] = Field(None, min_length=2)
