"""
Bucket status record and its persistence seam.

The convergence engine only ever hands a fully-formed :class:`BucketStatus`
to a :class:`StatusWriter`; until ``persist`` returns, a mutation is
provisional and the request keeps its previous status.
"""

from __future__ import annotations

import json
import os
import tempfile
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .exceptions import StatusPersistenceError


class BucketStatus(BaseModel):
    """Persisted state of the bucket owned by one resource."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str = Field(default="", description="Committed bucket name, empty until assigned")
    provisioned: bool = Field(
        default=False, description="Bucket confirmed to exist with hardening applied"
    )
    last_sync_timestamp: datetime | None = Field(
        default=None,
        alias="lastSyncTimestamp",
        description="Time of the last fully successful convergence pass",
    )

    @model_validator(mode="after")
    def check_provisioned_has_name(self) -> BucketStatus:
        if self.provisioned and not self.name:
            raise ValueError("a provisioned bucket status must carry a bucket name")
        return self


class StorageRequest(BaseModel):
    """The owning resource a bucket is converged for."""

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    name: str
    namespace: str | None = None
    status: BucketStatus = Field(default_factory=BucketStatus)


class StatusWriter(ABC):
    """Persists bucket status on behalf of the convergence engine."""

    @abstractmethod
    def persist(self, status: BucketStatus) -> None:
        """Durably store *status*.

        Raises:
            StatusPersistenceError: If the write fails.
        """
        pass


class JsonFileStatusWriter(StatusWriter):
    """Stores the status as a JSON document on the local filesystem.

    Writes go to a temporary file in the same directory which is then
    renamed over the target, so readers never see a partial record.
    """

    def __init__(self, path: str | os.PathLike) -> None:
        self.path = Path(path)

    def persist(self, status: BucketStatus) -> None:
        payload = status.model_dump(mode="json", by_alias=True)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
            try:
                with os.fdopen(fd, "w") as fh:
                    json.dump(payload, fh, indent=2)
                os.replace(tmp_path, self.path)
            except BaseException:
                os.unlink(tmp_path)
                raise
        except OSError as e:
            raise StatusPersistenceError(f"Failed to write status to '{self.path}'.") from e

    def load(self) -> BucketStatus:
        return load_status(self.path)


def load_status(path: str | os.PathLike) -> BucketStatus:
    """Read a status written by :class:`JsonFileStatusWriter`.

    Returns an empty status when the file does not exist yet.

    Raises:
        StatusPersistenceError: If the file cannot be read or parsed.
    """
    path = Path(path)
    if not path.exists():
        return BucketStatus()
    try:
        return BucketStatus.model_validate_json(path.read_text())
    except (OSError, ValidationError) as e:
        raise StatusPersistenceError(f"Failed to read status from '{path}'.") from e
