"""Bucketforge: converges a managed backup bucket on AWS S3 and GCP Cloud Storage.

Entry point for the library. Import :func:`select_driver` to get the
storage driver of a platform and run convergence passes with it::

    from bucketforge import bf_logger, select_driver, StorageRequest, JsonFileStatusWriter

    driver = select_driver(
        {"type": "GCP", "gcp": {"projectID": "my-project", "region": "us-central1"}},
        JsonFileStatusWriter("status.json"),
    )
    outcome = driver.create_storage(bf_logger, StorageRequest(name="velero"))
"""

from .base import (
    BucketClientBlueprint,
    StorageDriverBlueprint,
    BucketStatus,
    StorageRequest,
    StatusWriter,
    JsonFileStatusWriter,
    PlatformDescriptor,
    PassOutcome,
)
from .base.logger import bf_logger
from .factory import select_driver

__all__ = [
    "BucketClientBlueprint",
    "StorageDriverBlueprint",
    "BucketStatus",
    "StorageRequest",
    "StatusWriter",
    "JsonFileStatusWriter",
    "PlatformDescriptor",
    "PassOutcome",
    "bf_logger",
    "select_driver",
]
