"""Bucket client blueprint and the live attributes it reports."""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel, ConfigDict


class HardeningOptions(BaseModel):
    """Access-hardening flags a bucket must carry.

    Used both as a driver's required hardening and as the partial update
    sent to :meth:`BucketClientBlueprint.update_attributes`.
    """

    model_config = ConfigDict(frozen=True)

    uniform_access: bool = True
    block_public_access: bool = False

    def __bool__(self) -> bool:
        return self.uniform_access or self.block_public_access


class BucketAttributes(BaseModel):
    """Attributes read live from the provider. Never persisted or cached."""

    model_config = ConfigDict(frozen=True)

    name: str
    location: str | None = None
    uniform_access: bool = False
    public_access_blocked: bool = False

    def missing_hardening(self, required: HardeningOptions) -> HardeningOptions | None:
        """Return the flags in *required* that are not enabled on the bucket."""
        patch = HardeningOptions(
            uniform_access=required.uniform_access and not self.uniform_access,
            block_public_access=required.block_public_access and not self.public_access_blocked,
        )
        return patch or None


class BucketClientBlueprint(ABC):
    """Abstract per-provider bucket client.

    Maps to AWS S3 (and S3-compatible endpoints) and GCP Cloud Storage.
    Every call is a blocking network operation bounded by the client's
    call timeout; a timeout is an indeterminate failure.
    """

    @abstractmethod
    def bucket_exists(self, bucket_name: str) -> bool:
        """Report whether a bucket exists.

        Args:
            bucket_name: Bucket to look up.

        Returns:
            ``False`` only when the provider definitively reports the bucket
            as not found.

        Raises:
            StorageError: On any other failure (auth, network, quota, timeout).
        """
        pass

    @abstractmethod
    def create_bucket(
        self, bucket_name: str, location: str | None, hardening: HardeningOptions
    ) -> None:
        """Create a bucket with its location and hardening applied up front.

        Args:
            bucket_name: Globally unique bucket name.
            location: Region / location for the bucket.
            hardening: Access-hardening flags to set at creation.

        Raises:
            BucketAlreadyExistsError: If the name is already taken.
            StorageError: If creation fails for any other reason.
        """
        pass

    @abstractmethod
    def get_attributes(self, bucket_name: str) -> BucketAttributes:
        """Read the bucket's location and hardening state.

        Raises:
            BucketNotFoundError: If the bucket does not exist.
            StorageError: On any other failure.
        """
        pass

    @abstractmethod
    def update_attributes(self, bucket_name: str, patch: HardeningOptions) -> None:
        """Enable every hardening flag set in *patch*.

        Flags left ``False`` in the patch are not touched.

        Raises:
            StorageError: If the update fails.
        """
        pass
