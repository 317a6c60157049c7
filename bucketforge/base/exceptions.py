"""
Bucketforge exception hierarchy.

Provider failures inherit from :class:`StorageError` and are always
indeterminate: they are surfaced to the caller and retried by re-running
the whole pass.  A definitive "bucket not found" from an existence check is
not an error at all and never reaches this module.
"""


# ── Base ──────────────────────────────────────────────────────────────
class BucketforgeError(Exception):
    """Root exception for all Bucketforge errors."""


# ── Storage providers ─────────────────────────────────────────────────
class StorageError(BucketforgeError):
    """Indeterminate provider failure (auth, network, quota, timeout)."""


class BucketNotFoundError(StorageError):
    """Bucket not found."""


class BucketAlreadyExistsError(StorageError):
    """Bucket already exists."""


# ── Convergence ───────────────────────────────────────────────────────
class ConvergenceError(BucketforgeError):
    """Base exception for convergence pass failures."""


class BucketNameCollisionError(ConvergenceError):
    """A freshly proposed bucket name is already taken."""

    def __init__(self, bucket_name: str) -> None:
        super().__init__(f"Proposed bucket '{bucket_name}' already exists, retrying.")
        self.bucket_name = bucket_name


# ── Status persistence ────────────────────────────────────────────────
class StatusPersistenceError(BucketforgeError):
    """The bucket status could not be written."""


# ── Configuration ─────────────────────────────────────────────────────
class UnsupportedPlatformError(BucketforgeError, ValueError):
    """No storage driver exists for the requested platform kind."""

    def __init__(self, platform: str | None) -> None:
        super().__init__(f"Unsupported platform: {platform}")
        self.platform = platform


# Errors a control loop may clear by invoking the pass again later.
RETRYABLE_ERRORS: tuple[type[BaseException], ...] = (
    StorageError,
    BucketNameCollisionError,
    StatusPersistenceError,
)
