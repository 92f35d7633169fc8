from functools import lru_cache
from pathlib import Path
from typing import Annotated, List

from pydantic import AliasChoices, AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_name: str = Field(default="Parley API", env="APP_NAME", description="Human readable service name")
    environment: str = Field(default="development", env="ENVIRONMENT", description="Deployment environment name")
    debug: bool = Field(default=True, env="DEBUG", description="Enable debug mode")

    cors_origins: Annotated[List[AnyHttpUrl], NoDecode] = Field(
        default_factory=lambda: [
            "http://localhost",
            "http://localhost:3000",
            "http://localhost:5173",
            "http://127.0.0.1",
        ],
        env="CORS_ORIGINS",
        description="List of allowed CORS origins",
    )

    cors_allow_origin_regex: str | None = Field(
        default=r"^https?://(localhost|127\.0\.0\.1|\[::1\])(:\d+)?$",
        env="CORS_ALLOW_ORIGIN_REGEX",
        description="Optional regular expression that matches allowed CORS origins",
    )

    database_user: str = Field(default="parley", validation_alias=AliasChoices("DB_USER", "DATABASE_USER"))
    database_password: str = Field(default="parley", validation_alias=AliasChoices("DB_PASSWORD", "DATABASE_PASSWORD"))
    database_host: str = Field(default="db", validation_alias=AliasChoices("DB_HOST", "DATABASE_HOST"))
    database_port: int = Field(default=3306, validation_alias=AliasChoices("DB_PORT", "DATABASE_PORT"))
    database_name: str = Field(default="parley", validation_alias=AliasChoices("DB_NAME", "DATABASE_NAME"))
    database_url_override: str | None = Field(
        default=None,
        validation_alias="DATABASE_URL",
        description="Full SQLAlchemy URL; takes precedence over the DB_* fields",
    )

    chat_history_default_limit: int = Field(default=50, env="CHAT_HISTORY_DEFAULT_LIMIT")
    chat_history_max_limit: int = Field(default=100, env="CHAT_HISTORY_MAX_LIMIT")
    search_default_limit: int = Field(default=20, env="SEARCH_DEFAULT_LIMIT")

    typing_visibility_seconds: int = Field(
        default=30,
        env="TYPING_VISIBILITY_SECONDS",
        description="How long a typing indicator stays visible to other users.",
    )
    typing_cleanup_seconds: int = Field(
        default=10,
        env="TYPING_CLEANUP_SECONDS",
        description="Age after which indicators are physically removed on the write path.",
    )

    link_preview_timeout_seconds: float = Field(
        default=10.0,
        env="LINK_PREVIEW_TIMEOUT_SECONDS",
        description="Timeout applied to outbound link preview requests.",
    )
    link_preview_max_bytes: int = Field(
        default=1024 * 1024,
        env="LINK_PREVIEW_MAX_BYTES",
        description="Maximum HTML payload read when building a link preview.",
    )
    link_preview_max_redirects: int = Field(default=3, env="LINK_PREVIEW_MAX_REDIRECTS")
    link_preview_user_agent: str = Field(
        default="Mozilla/5.0 (compatible; LinkPreviewBot/1.0)",
        env="LINK_PREVIEW_USER_AGENT",
    )

    media_root: Path = Field(default=Path("uploads"), env="MEDIA_ROOT")
    media_base_url: str = Field(default="/media", env="MEDIA_BASE_URL")
    max_image_upload_size: int = Field(
        default=5 * 1024 * 1024,
        env="MAX_IMAGE_UPLOAD_SIZE",
        description="Maximum decoded image size in bytes",
    )

    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).resolve().parents[2] / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def database_url(self) -> str:
        if self.database_url_override:
            return self.database_url_override
        return (
            f"mysql+pymysql://{self.database_user}:{self.database_password}"
            f"@{self.database_host}:{self.database_port}/{self.database_name}"
        )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v):  # type: ignore[override]
        if v in (None, "", Ellipsis):
            return v
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        if isinstance(v, (list, tuple, set)):
            return list(v)
        return v

    @field_validator("media_root", mode="before")
    @classmethod
    def resolve_media_root(cls, value: str | Path) -> Path:
        if isinstance(value, Path):
            return value.resolve()
        return Path(value).resolve()


@lru_cache
def get_settings() -> Settings:
    return Settings()
