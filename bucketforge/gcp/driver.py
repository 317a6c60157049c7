"""GCP backup storage driver."""

from __future__ import annotations

from bucketforge.base import HardeningOptions, StorageDriverBlueprint
from bucketforge.base.config import ConvergenceSettings, GCPConfig
from bucketforge.base.platforms import GCP_PLATFORM, PlatformDescriptor
from bucketforge.base.status import StatusWriter
from bucketforge.gcp.storage import Storage


class Driver(StorageDriverBlueprint):
    """Converges a GCS bucket with uniform bucket-level access enforced."""

    platform = GCP_PLATFORM
    required_hardening = HardeningOptions(uniform_access=True, block_public_access=False)

    def __init__(
        self,
        infrastructure: PlatformDescriptor,
        config: GCPConfig,
        status_writer: StatusWriter,
        settings: ConvergenceSettings | None = None,
    ) -> None:
        settings = settings or ConvergenceSettings()
        super().__init__(
            infrastructure,
            Storage(config, timeout=settings.call_timeout),
            status_writer,
            settings,
        )
