"""Storage driver blueprint."""

from __future__ import annotations

from abc import ABC

from .config import ConvergenceSettings
from .engine import ConvergenceEngine, PassOutcome
from .logger import BucketforgeLogger
from .platforms import PlatformDescriptor
from .status import StatusWriter, StorageRequest
from .storage import BucketClientBlueprint, HardeningOptions


class StorageDriverBlueprint(ABC):
    """Provider-agnostic backup storage driver.

    A driver binds a provider bucket client to the platform's location and
    the hardening that platform requires, and runs convergence passes with
    them. Subclasses set ``platform`` and ``required_hardening`` and build
    their client in ``__init__``.
    """

    platform: str
    required_hardening: HardeningOptions

    def __init__(
        self,
        infrastructure: PlatformDescriptor,
        client: BucketClientBlueprint,
        status_writer: StatusWriter,
        settings: ConvergenceSettings | None = None,
    ) -> None:
        self.infrastructure = infrastructure
        self.client = client
        self.settings = settings or ConvergenceSettings()
        self.engine = ConvergenceEngine(
            client,
            status_writer,
            location=infrastructure.location,
            hardening=self.required_hardening,
            settings=self.settings,
        )

    @property
    def platform_type(self) -> str:
        """Platform kind this driver serves."""
        return self.platform

    def storage_exists(self, bucket_name: str) -> bool:
        """Report whether *bucket_name* exists on this platform.

        Raises:
            StorageError: If existence cannot be determined.
        """
        return self.client.bucket_exists(bucket_name)

    def create_storage(
        self, logger: BucketforgeLogger, request: StorageRequest
    ) -> PassOutcome:
        """Run one convergence pass for *request*'s bucket."""
        return self.engine.converge(request, logger.bind(platform=self.platform))
