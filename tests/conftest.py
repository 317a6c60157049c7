"""In-memory bucket provider and status writer shared by engine and driver tests."""

import pytest

from bucketforge.base import BucketAttributes, BucketClientBlueprint, HardeningOptions
from bucketforge.base.exceptions import (
    BucketAlreadyExistsError,
    BucketNotFoundError,
    StatusPersistenceError,
)
from bucketforge.base.status import BucketStatus, StatusWriter


class FakeBucketClient(BucketClientBlueprint):
    """Keeps buckets in a dict and records every call.

    ``errors`` maps an operation name to an exception raised (once) the next
    time that operation is called.
    """

    MUTATIONS = ("create_bucket", "update_attributes")

    def __init__(self, harden_on_create: bool = True) -> None:
        self.buckets: dict[str, BucketAttributes] = {}
        self.calls: list[tuple] = []
        self.errors: dict[str, Exception] = {}
        self.harden_on_create = harden_on_create

    def _record(self, op: str, *args) -> None:
        self.calls.append((op, *args))
        if op in self.errors:
            raise self.errors.pop(op)

    @property
    def mutations(self) -> list[tuple]:
        return [c for c in self.calls if c[0] in self.MUTATIONS]

    def add_bucket(self, name, location="us-central1", uniform_access=True, public_access_blocked=True):
        self.buckets[name] = BucketAttributes(
            name=name,
            location=location,
            uniform_access=uniform_access,
            public_access_blocked=public_access_blocked,
        )

    def bucket_exists(self, bucket_name):
        self._record("bucket_exists", bucket_name)
        return bucket_name in self.buckets

    def create_bucket(self, bucket_name, location, hardening):
        self._record("create_bucket", bucket_name, location, hardening)
        if bucket_name in self.buckets:
            raise BucketAlreadyExistsError(f"Failed to create bucket '{bucket_name}'.")
        self.add_bucket(
            bucket_name,
            location=location,
            uniform_access=self.harden_on_create and hardening.uniform_access,
            public_access_blocked=self.harden_on_create and hardening.block_public_access,
        )

    def get_attributes(self, bucket_name):
        self._record("get_attributes", bucket_name)
        if bucket_name not in self.buckets:
            raise BucketNotFoundError(bucket_name)
        return self.buckets[bucket_name]

    def update_attributes(self, bucket_name, patch: HardeningOptions):
        self._record("update_attributes", bucket_name, patch)
        attrs = self.buckets[bucket_name]
        self.buckets[bucket_name] = attrs.model_copy(update={
            "uniform_access": attrs.uniform_access or patch.uniform_access,
            "public_access_blocked": attrs.public_access_blocked or patch.block_public_access,
        })


class RecordingStatusWriter(StatusWriter):
    """Appends every persisted status; ``fail_next`` makes the next write fail."""

    def __init__(self) -> None:
        self.persisted: list[BucketStatus] = []
        self.fail_next = False

    def persist(self, status):
        if self.fail_next:
            self.fail_next = False
            raise StatusPersistenceError("status update rejected")
        self.persisted.append(status)

    @property
    def last(self) -> BucketStatus | None:
        return self.persisted[-1] if self.persisted else None


@pytest.fixture
def fake_client():
    return FakeBucketClient()


@pytest.fixture
def status_writer():
    return RecordingStatusWriter()
