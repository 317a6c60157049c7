"""Abstract blueprints and core convergence machinery.

Every provider implements :class:`BucketClientBlueprint` and
:class:`StorageDriverBlueprint`. Import them to type-hint your own code or
to add a new platform.
"""

from .storage import BucketClientBlueprint, BucketAttributes, HardeningOptions
from .driver import StorageDriverBlueprint
from .engine import ConvergenceEngine, PassOutcome
from .status import BucketStatus, StorageRequest, StatusWriter, JsonFileStatusWriter
from .platforms import PlatformDescriptor, supported_platforms


__all__ = [
    "BucketClientBlueprint",
    "BucketAttributes",
    "HardeningOptions",
    "StorageDriverBlueprint",
    "ConvergenceEngine",
    "PassOutcome",
    "BucketStatus",
    "StorageRequest",
    "StatusWriter",
    "JsonFileStatusWriter",
    "PlatformDescriptor",
    "supported_platforms",
]
