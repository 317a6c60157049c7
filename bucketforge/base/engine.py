"""
Bucket convergence engine.

One call to :meth:`ConvergenceEngine.converge` is one convergence pass: a
strictly ordered sequence of provider calls that moves a request's
:class:`~bucketforge.base.status.BucketStatus` one step closer to "a
uniquely named, hardened bucket exists in the right region".  A pass
always starts from the status it is handed, never from anything left over
from a previous pass, so it is safe to re-enter from any persisted state.

States, keyed off the status:

* unnamed: propose a name, refuse it if it already exists, otherwise
  commit it and end the pass;
* named but not provisioned: create the bucket, tolerating "already exists";
* verify (every named pass): confirm the bucket exists and read its
  attributes;
* hardening: enable any required access-hardening flag that is off;
* converged: mark the status provisioned and stamp the sync time.

The engine keeps no retry state. Errors propagate to the caller, which
decides when to run the next pass.
"""

from __future__ import annotations

import enum
from datetime import datetime, timezone
from typing import Callable

from .config import ConvergenceSettings
from .exceptions import BucketAlreadyExistsError, BucketNameCollisionError, StorageError
from .logger import BucketforgeLogger, bf_logger
from .naming import generate_bucket_name
from .status import BucketStatus, StatusWriter, StorageRequest
from .storage import BucketClientBlueprint, HardeningOptions


class PassOutcome(enum.Enum):
    """How a convergence pass ended."""

    NAME_ASSIGNED = "name_assigned"
    BUCKET_MISSING = "bucket_missing"
    CONVERGED = "converged"

    @property
    def requeue(self) -> bool:
        """Whether another pass is needed to reach the converged state."""
        return self is not PassOutcome.CONVERGED


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ConvergenceEngine:
    """Runs convergence passes against a single bucket client.

    Attributes:
        client: Provider bucket client.
        status_writer: Persists every status mutation.
        location: Region / location new buckets are created in.
        hardening: Access-hardening flags the bucket must carry.
        settings: Name prefix and call timeout.
    """

    def __init__(
        self,
        client: BucketClientBlueprint,
        status_writer: StatusWriter,
        *,
        location: str | None,
        hardening: HardeningOptions,
        settings: ConvergenceSettings | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.client = client
        self.status_writer = status_writer
        self.location = location
        self.hardening = hardening
        self.settings = settings or ConvergenceSettings()
        self.clock = clock

    def converge(
        self, request: StorageRequest, logger: BucketforgeLogger | None = None
    ) -> PassOutcome:
        """Run one convergence pass for *request*.

        Args:
            request: Owning resource; its ``status`` is replaced after each
                successful persist.
            logger: Logger to report progress on; defaults to the module
                singleton.

        Returns:
            The pass outcome. ``NAME_ASSIGNED`` and ``BUCKET_MISSING`` ask for
            another pass.

        Raises:
            BucketNameCollisionError: The proposed name already exists.
            StorageError: A provider call failed indeterminately.
            StatusPersistenceError: The status could not be written.
        """
        logger = (logger or bf_logger).bind(owner=request.name, region=self.location)
        status = request.status

        if not status.name:
            return self._assign_name(request, logger)

        bucket_name = status.name
        logger = logger.bind(bucket=bucket_name)

        if not status.provisioned:
            logger.info("Storage bucket defined, but not provisioned", operation="create_bucket")
            self._create(bucket_name, logger)

        logger.info("Verifying storage bucket exists", operation="bucket_exists")
        if not self.client.bucket_exists(bucket_name):
            logger.error(
                "Storage bucket doesn't appear to exist", operation="bucket_exists"
            )
            self._persist(request, status.model_copy(update={"provisioned": False}))
            return PassOutcome.BUCKET_MISSING

        attrs = self.client.get_attributes(bucket_name)
        self._check_location(attrs.location, logger)
        self._enforce_hardening(bucket_name, attrs.missing_hardening(self.hardening), logger)
        self._enforce_lifecycle(bucket_name, logger)
        self._enforce_labels(bucket_name, logger)

        self._persist(
            request,
            status.model_copy(
                update={"provisioned": True, "last_sync_timestamp": self.clock()}
            ),
        )
        logger.info("Storage bucket converged", operation="converge")
        return PassOutcome.CONVERGED

    # --- States ---

    def _assign_name(self, request: StorageRequest, logger: BucketforgeLogger) -> PassOutcome:
        logger.info("No storage bucket defined", operation="assign_name")
        proposed = generate_bucket_name(self.settings.bucket_prefix)
        if self.client.bucket_exists(proposed):
            raise BucketNameCollisionError(proposed)

        logger.info("Setting proposed bucket name", bucket=proposed, operation="assign_name")
        self._persist(request, BucketStatus(name=proposed, provisioned=False))
        return PassOutcome.NAME_ASSIGNED

    def _create(self, bucket_name: str, logger: BucketforgeLogger) -> None:
        try:
            self.client.create_bucket(bucket_name, self.location, self.hardening)
        except BucketAlreadyExistsError:
            # Possibly created by an earlier, interrupted pass; verify decides.
            logger.info("Storage bucket already exists", operation="create_bucket")
        except StorageError:
            logger.error("Error occurred when creating bucket", operation="create_bucket")
            raise

    def _enforce_hardening(
        self, bucket_name: str, patch: HardeningOptions | None, logger: BucketforgeLogger
    ) -> None:
        if patch is None:
            return
        logger.info(
            "Enforcing access hardening on bucket",
            operation="update_attributes",
        )
        try:
            self.client.update_attributes(bucket_name, patch)
        except StorageError:
            logger.error(
                "Error occurred when enforcing access hardening", operation="update_attributes"
            )
            raise

    def _enforce_lifecycle(self, bucket_name: str, logger: BucketforgeLogger) -> None:
        # Retention rules are not managed yet; this stage only marks their place.
        logger.debug("Lifecycle rules are not enforced", operation="lifecycle")

    def _enforce_labels(self, bucket_name: str, logger: BucketforgeLogger) -> None:
        logger.debug("Bucket labels are not enforced", operation="labels")

    def _check_location(self, live_location: str | None, logger: BucketforgeLogger) -> None:
        if not live_location or not self.location:
            return
        if live_location.lower() != self.location.lower():
            # Buckets cannot be moved between regions.
            logger.warning(
                f"Bucket location {live_location} differs from platform region {self.location}",
                operation="get_attributes",
            )

    def _persist(self, request: StorageRequest, status: BucketStatus) -> None:
        self.status_writer.persist(status)
        request.status = status
