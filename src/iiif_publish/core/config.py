"""Publishing configuration via Pydantic Settings.

Object storage connection details and logging options are loaded from
environment variables (or a ``.env`` file) following 12-factor principles.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Publishing settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # S3 / S3-Compatible Object Storage
    aws_bucket_name: str | None = Field(
        default=None,
        description="Bucket that receives published manifests, tiles and variants",
    )
    aws_region: str | None = Field(
        default=None,
        description="Bucket region (falls back to the boto3 default chain when unset)",
    )
    aws_access_key_id: str | None = Field(
        default=None,
        description="Access key (falls back to the boto3 credential chain when unset)",
    )
    aws_secret_access_key: str | None = Field(
        default=None,
        description="Secret key (falls back to the boto3 credential chain when unset)",
    )
    aws_endpoint_url: str | None = Field(
        default=None,
        description="Custom S3-compatible endpoint (MinIO, R2, ...)",
    )
    aws_public_url: str | None = Field(
        default=None,
        description="Public URL prefix for the bucket (custom domain or CDN)",
    )
    upload_acl: str | None = Field(
        default="public-read",
        description="Canned ACL applied to uploaded objects and redirects; empty disables",
    )

    @field_validator("aws_endpoint_url", "aws_public_url")
    @classmethod
    def strip_trailing_slash(cls, v: str | None) -> str | None:
        if not v:
            return None
        return v.rstrip("/")

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    log_dir: str | None = Field(
        default=None,
        description="Directory for log files (enables file logging with 24h rotation when set)",
    )


def get_settings() -> Settings:
    """Create and return publishing settings."""
    return Settings()
