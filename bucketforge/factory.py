"""Storage driver factory.

Provides :func:`select_driver`, the single entry-point for obtaining the
backup storage driver of a platform.  The driver is chosen once, by
platform kind, and every later call goes straight to it.
"""

from typing import Any

from bucketforge.base import PlatformDescriptor, StatusWriter, StorageDriverBlueprint
from bucketforge.base.config import ConvergenceSettings, validate_config
from bucketforge.base.exceptions import UnsupportedPlatformError
from bucketforge.base.platforms import AWS_PLATFORM, GCP_PLATFORM, supported_platforms
from bucketforge.aws.driver import Driver as AWSDriver
from bucketforge.gcp.driver import Driver as GCPDriver


# Platform kind -> driver class
_DRIVER_REGISTRY: dict[supported_platforms, type[StorageDriverBlueprint]] = {
    AWS_PLATFORM: AWSDriver,
    GCP_PLATFORM: GCPDriver,
}


def _provider_config(infrastructure: PlatformDescriptor, config: dict) -> dict:
    """Fill provider config gaps from the platform descriptor."""
    config = dict(config)
    if infrastructure.type == GCP_PLATFORM and infrastructure.gcp is not None:
        config.setdefault("project_id", infrastructure.gcp.project_id)
    if infrastructure.type == AWS_PLATFORM and infrastructure.aws is not None:
        config.setdefault("region_name", infrastructure.aws.region)
    return config


def select_driver(
    infrastructure: PlatformDescriptor | dict[str, Any],
    status_writer: StatusWriter,
    config: dict | None = None,
    settings: ConvergenceSettings | None = None,
) -> StorageDriverBlueprint:
    """
    Return the storage driver for the cluster's infrastructure platform.
    Args:
        infrastructure: Platform descriptor, or a dict validated into one.
        status_writer: Persists the bucket status after each transition.
        config: Provider credentials (see AWSConfig / GCPConfig).
        settings: Bucket name prefix and provider call timeout.
    Returns:
        A driver bound to the platform's location and hardening defaults.
    Raises:
        UnsupportedPlatformError: If the platform kind has no driver.
        ValueError: If the descriptor lacks the platform's details.
        pydantic.ValidationError: If the descriptor or config is invalid.
    """
    if not isinstance(infrastructure, PlatformDescriptor):
        infrastructure = PlatformDescriptor.model_validate(infrastructure)

    driver_class = _DRIVER_REGISTRY.get(infrastructure.type)
    if driver_class is None:
        raise UnsupportedPlatformError(infrastructure.type)

    if infrastructure.location is None:
        raise ValueError(
            f"Platform descriptor of type '{infrastructure.type}' is missing its "
            f"'{infrastructure.type.lower()}' details"
        )

    config_obj = validate_config(
        infrastructure.type, _provider_config(infrastructure, config or {})
    )
    return driver_class(infrastructure, config_obj, status_writer, settings)
