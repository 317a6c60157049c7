"""
Pydantic configuration models.

Validates provider credentials and convergence settings when a driver is
selected instead of silently passing bad values to SDK clients.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any
from pydantic import BaseModel, ConfigDict, Field, model_validator

from .naming import BUCKET_PREFIX
from .platforms import supported_platforms


class AWSConfig(BaseModel):
    """Configuration for the S3 storage client.

    Credentials are resolved in order:
    1. Explicit values passed in the config dict.
    2. Environment variables (AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY,
       AWS_DEFAULT_REGION, AWS_ENDPOINT_URL_S3).
    3. If neither is set, fields are left as None so boto3 can fall back to its
       own credential chain (instance metadata, ~/.aws/credentials, etc.).

    ``endpoint_url`` points the client at an S3-compatible backend.
    """

    model_config = ConfigDict(extra="forbid")

    aws_access_key_id: str | None = Field(default=None, description="AWS access key ID")
    aws_secret_access_key: str | None = Field(default=None, description="AWS secret access key")
    region_name: str | None = Field(default=None, description="AWS region (e.g. 'us-east-1')")
    endpoint_url: str | None = Field(
        default=None, description="Custom endpoint for S3-compatible storage"
    )

    @model_validator(mode="before")
    @classmethod
    def resolve_from_env(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Fall back to environment variables for missing credentials."""
        env_map = {
            "aws_access_key_id": "AWS_ACCESS_KEY_ID",
            "aws_secret_access_key": "AWS_SECRET_ACCESS_KEY",
            "region_name": "AWS_DEFAULT_REGION",
            "endpoint_url": "AWS_ENDPOINT_URL_S3",
        }
        for field, env_var in env_map.items():
            if not values.get(field):
                values[field] = os.environ.get(env_var)
        return values


class GCPConfig(BaseModel):
    """Configuration for the GCS storage client.

    Credentials are resolved in order:
    1. Explicit values passed in the config dict.
    2. Environment variables (GOOGLE_CLOUD_PROJECT, GOOGLE_APPLICATION_CREDENTIALS).
    3. If neither is set, credentials are left as None so the GCP SDK can fall
       back to Application Default Credentials (ADC).
    """

    model_config = ConfigDict(extra="forbid")

    project_id: str | None = Field(default=None, description="GCP project ID")
    credentials: Any | None = Field(default=None, description="GCP credentials object")
    credentials_path: str | None = Field(
        default=None, description="Path to service account JSON key file"
    )

    @model_validator(mode="before")
    @classmethod
    def resolve_from_env(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Fall back to environment variables for missing config."""
        if not values.get("project_id"):
            values["project_id"] = os.environ.get("GOOGLE_CLOUD_PROJECT") or os.environ.get(
                "GCLOUD_PROJECT"
            )
        if not values.get("credentials_path"):
            values["credentials_path"] = os.environ.get("GOOGLE_APPLICATION_CREDENTIALS")
        return values

    @model_validator(mode="after")
    def validate_project_and_credentials(self) -> GCPConfig:
        """Ensure project_id is set and load credentials from path if needed."""
        if self.project_id is None:
            raise ValueError(
                "GCP project_id is required. Set it explicitly, via the platform "
                "descriptor, or via GOOGLE_CLOUD_PROJECT / GCLOUD_PROJECT."
            )
        if self.credentials is None and self.credentials_path:
            path = Path(self.credentials_path)
            if not path.exists():
                raise ValueError(f"Credentials file not found: {self.credentials_path}")
            from google.oauth2 import service_account  # lazy import

            self.credentials = service_account.Credentials.from_service_account_file(
                str(path)
            )
        return self


class ConvergenceSettings(BaseModel):
    """Immutable knobs injected into drivers and the convergence engine.

    Environment fallbacks: BUCKETFORGE_BUCKET_PREFIX, BUCKETFORGE_CALL_TIMEOUT.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    bucket_prefix: str = Field(
        default=BUCKET_PREFIX, min_length=1, description="Prefix of generated bucket names"
    )
    call_timeout: float = Field(
        default=60.0, gt=0, description="Deadline in seconds for each provider call"
    )

    @model_validator(mode="before")
    @classmethod
    def resolve_from_env(cls, values: dict[str, Any]) -> dict[str, Any]:
        env_map = {
            "bucket_prefix": "BUCKETFORGE_BUCKET_PREFIX",
            "call_timeout": "BUCKETFORGE_CALL_TIMEOUT",
        }
        for field, env_var in env_map.items():
            if values.get(field) is None and os.environ.get(env_var):
                values[field] = os.environ[env_var]
        return values


# Map platform kinds to their credential models for dynamic validation
CONFIG_REGISTRY: dict[supported_platforms, type[BaseModel]] = {
    "AWS": AWSConfig,
    "GCP": GCPConfig,
}


def validate_config(platform: str, config: dict) -> BaseModel:
    """Validate and return a typed config model for the given platform.

    Args:
        platform: The platform kind (e.g. 'AWS', 'GCP').
        config: Raw configuration dictionary.

    Returns:
        A validated Pydantic config model.

    Raises:
        ValueError: If the platform is unknown.
        pydantic.ValidationError: If the config is invalid.
    """
    model = CONFIG_REGISTRY.get(platform)
    if model is None:
        raise ValueError(f"No config model registered for platform: {platform}")
    return model(**config)


__all__ = [
    "AWSConfig",
    "GCPConfig",
    "ConvergenceSettings",
    "CONFIG_REGISTRY",
    "validate_config",
]
