from typing import NoReturn

from google.cloud import storage as gcs
from google.cloud.storage.constants import PUBLIC_ACCESS_PREVENTION_ENFORCED
from google.api_core.exceptions import GoogleAPIError, NotFound, Conflict
from google.auth.exceptions import GoogleAuthError

from bucketforge.base.exceptions import (
    StorageError,
    BucketNotFoundError,
    BucketAlreadyExistsError,
)
from bucketforge.base import BucketClientBlueprint, BucketAttributes, HardeningOptions
from bucketforge.base.config import GCPConfig

# requests timeouts and connection failures are OSError subclasses
_PROVIDER_ERRORS = (GoogleAPIError, GoogleAuthError, OSError)


def _handle_error(e: Exception, message: str) -> NoReturn:
    """Raise a mapped exception or a generic StorageError."""
    if isinstance(e, NotFound):
        raise BucketNotFoundError(message) from e
    if isinstance(e, Conflict):
        raise BucketAlreadyExistsError(message) from e
    raise StorageError(message) from e


def _apply_hardening(bucket: gcs.Bucket, hardening: HardeningOptions) -> None:
    if hardening.uniform_access:
        bucket.iam_configuration.uniform_bucket_level_access_enabled = True
    if hardening.block_public_access:
        bucket.iam_configuration.public_access_prevention = PUBLIC_ACCESS_PREVENTION_ENFORCED


class Storage(BucketClientBlueprint):
    """GCP Cloud Storage bucket client.

    Attributes:
        client: google-cloud-storage client.
        project: Project new buckets are created in.
        timeout: Per-call deadline in seconds.
    """

    def __init__(self, config: GCPConfig, timeout: float = 60.0) -> None:
        """Initialize the GCP Cloud Storage client.

        Args:
            config: GCP configuration with project_id and optional credentials.
            timeout: Deadline in seconds applied to every API call.
        """
        self.client = gcs.Client(
            project=config.project_id,
            credentials=config.credentials,
        )
        self.project = config.project_id
        self.timeout = timeout

    def bucket_exists(self, bucket_name: str) -> bool:
        """Check bucket existence; only ``NotFound`` counts as absent."""
        try:
            self.client.get_bucket(bucket_name, timeout=self.timeout)
        except NotFound:
            return False
        except _PROVIDER_ERRORS as e:
            _handle_error(e, f"Failed to check whether bucket '{bucket_name}' exists.")
        return True

    def create_bucket(
        self, bucket_name: str, location: str | None, hardening: HardeningOptions
    ) -> None:
        """Create a GCS bucket with uniform bucket-level access pre-set."""
        bucket = self.client.bucket(bucket_name)
        _apply_hardening(bucket, hardening)
        try:
            self.client.create_bucket(
                bucket,
                project=self.project,
                location=location,
                timeout=self.timeout,
            )
        except _PROVIDER_ERRORS as e:
            _handle_error(e, f"Failed to create bucket '{bucket_name}'.")

    def get_attributes(self, bucket_name: str) -> BucketAttributes:
        """Read location and IAM configuration of a GCS bucket."""
        try:
            bucket = self.client.get_bucket(bucket_name, timeout=self.timeout)
        except _PROVIDER_ERRORS as e:
            _handle_error(e, f"Failed to retrieve attributes of bucket '{bucket_name}'.")
        iam = bucket.iam_configuration
        return BucketAttributes(
            name=bucket_name,
            location=bucket.location,
            uniform_access=bool(iam.uniform_bucket_level_access_enabled),
            public_access_blocked=iam.public_access_prevention == PUBLIC_ACCESS_PREVENTION_ENFORCED,
        )

    def update_attributes(self, bucket_name: str, patch: HardeningOptions) -> None:
        """Patch the bucket's IAM configuration with the requested flags.

        The live bucket is read first: GCS patches ``iamConfiguration`` as a
        whole, so fields outside the patch must carry their current values.
        """
        try:
            bucket = self.client.get_bucket(bucket_name, timeout=self.timeout)
            _apply_hardening(bucket, patch)
            bucket.patch(timeout=self.timeout)
        except _PROVIDER_ERRORS as e:
            _handle_error(e, f"Failed to enforce access hardening on bucket '{bucket_name}'.")
