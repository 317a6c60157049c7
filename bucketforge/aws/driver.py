"""AWS backup storage driver."""

from __future__ import annotations

from bucketforge.base import HardeningOptions, StorageDriverBlueprint
from bucketforge.base.config import AWSConfig, ConvergenceSettings
from bucketforge.base.platforms import AWS_PLATFORM, PlatformDescriptor
from bucketforge.base.status import StatusWriter
from bucketforge.aws.storage import Storage


class Driver(StorageDriverBlueprint):
    """Converges an S3 bucket with ACLs disabled and public access blocked."""

    platform = AWS_PLATFORM
    required_hardening = HardeningOptions(uniform_access=True, block_public_access=True)

    def __init__(
        self,
        infrastructure: PlatformDescriptor,
        config: AWSConfig,
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
