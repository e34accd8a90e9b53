import logging
from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = Field("sqlite:///./tastebox.db", alias="DATABASE_URL")
    auth_secret_key: str = Field("change-me", alias="AUTH_SECRET_KEY")
    auth_algorithm: str = Field("HS256", alias="AUTH_ALGORITHM")
    auth_token_ttl_days: int = Field(7, alias="AUTH_TOKEN_TTL_DAYS")
    password_hash_rounds: int = Field(12, alias="PASSWORD_HASH_ROUNDS")
    media_root: Path = Field(Path("media"), alias="MEDIA_ROOT")
    media_url_prefix: str = Field("/media", alias="MEDIA_URL_PREFIX")
    profile_photo_max_bytes: int = Field(5 * 1024 * 1024, alias="PROFILE_PHOTO_MAX_BYTES")
    cors_allow_origins: List[str] = Field(default_factory=lambda: ["*"], alias="CORS_ALLOW_ORIGINS")
    llm_base_url: str = Field("https://api.openai.com/v1", alias="LLM_BASE_URL")
    llm_api_key: str | None = Field(None, alias="OPENAI_API_KEY")
    llm_model_name: str = Field("gpt-4o-mini", alias="LLM_MODEL_NAME")
    llm_timeout_seconds: float = Field(90.0, alias="LLM_TIMEOUT_SECONDS")
    llm_extraction_max_tokens: int = Field(4000, alias="LLM_EXTRACTION_MAX_TOKENS")
    llm_extraction_temperature: float = Field(0.2, alias="LLM_EXTRACTION_TEMPERATURE")
    scraper_user_agent: str = Field(
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0 Safari/537.36",
        alias="SCRAPER_USER_AGENT",
    )
    fetch_timeout_seconds: float = Field(15.0, alias="FETCH_TIMEOUT_SECONDS")
    html_prompt_max_chars: int = Field(8000, alias="HTML_PROMPT_MAX_CHARS")
    document_max_bytes: int = Field(50 * 1024 * 1024, alias="DOCUMENT_MAX_BYTES")
    document_prompt_max_chars: int = Field(12000, alias="DOCUMENT_PROMPT_MAX_CHARS")
    recipe_image_max_bytes: int = Field(5 * 1024 * 1024, alias="RECIPE_IMAGE_MAX_BYTES")
    recipe_image_s3_bucket: str | None = Field(None, alias="RECIPE_IMAGE_S3_BUCKET")
    recipe_image_s3_region: str | None = Field(None, alias="RECIPE_IMAGE_S3_REGION")
    recipe_image_s3_prefix: str = Field("recipe-images", alias="RECIPE_IMAGE_S3_PREFIX")
    s3_endpoint_url: str | None = Field(None, alias="S3_ENDPOINT_URL")
    s3_force_path_style: bool = Field(False, alias="S3_FORCE_PATH_STYLE")
    s3_public_base_url: str | None = Field(None, alias="S3_PUBLIC_BASE_URL")
    s3_public_acl: bool = Field(True, alias="S3_PUBLIC_ACL")
    aws_access_key_id: str | None = Field(None, alias="AWS_ACCESS_KEY_ID")
    aws_secret_access_key: str | None = Field(None, alias="AWS_SECRET_ACCESS_KEY")
    aws_session_token: str | None = Field(None, alias="AWS_SESSION_TOKEN")

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")


logger = logging.getLogger(__name__)


@lru_cache
def get_settings() -> Settings:
    try:
        settings = Settings()
    except PermissionError:
        logger.warning("Unable to read .env; continuing with environment variables only")
        settings = Settings(_env_file=None)
    settings.media_root.mkdir(parents=True, exist_ok=True)
    return settings
