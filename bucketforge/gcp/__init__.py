"""GCP provider implementations."""

from .driver import Driver
from .storage import Storage

__all__ = [
    "Driver",
    "Storage",
]
