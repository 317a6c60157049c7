"""Platform kinds and the infrastructure descriptor drivers are selected by."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


supported_platforms = Literal["AWS", "GCP"]

AWS_PLATFORM = "AWS"
GCP_PLATFORM = "GCP"


class AWSPlatformStatus(BaseModel):
    """AWS-specific infrastructure details."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    region: str = Field(description="AWS region buckets are created in")


class GCPPlatformStatus(BaseModel):
    """GCP-specific infrastructure details."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    project_id: str = Field(alias="projectID", description="GCP project owning the bucket")
    region: str = Field(description="GCS location buckets are created in")


class PlatformDescriptor(BaseModel):
    """Read-only description of the cluster's infrastructure platform.

    ``type`` is deliberately a plain string: an unknown platform kind must
    reach :func:`bucketforge.factory.select_driver` and fail there with an
    :class:`~bucketforge.base.exceptions.UnsupportedPlatformError`.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: str = Field(description="Platform kind, e.g. 'AWS' or 'GCP'")
    aws: AWSPlatformStatus | None = None
    gcp: GCPPlatformStatus | None = None

    @property
    def location(self) -> str | None:
        """Region of the platform block matching ``type``, if present."""
        if self.type == AWS_PLATFORM and self.aws is not None:
            return self.aws.region
        if self.type == GCP_PLATFORM and self.gcp is not None:
            return self.gcp.region
        return None
