"""Bucket name generation."""

import uuid

# Identifies our buckets inside a shared account / project namespace.
BUCKET_PREFIX = "managed-velero-backups-"


def generate_bucket_name(prefix: str = BUCKET_PREFIX) -> str:
    """Return *prefix* followed by a random UUID4.

    Args:
        prefix: Fixed prefix identifying managed buckets.

    Returns:
        A candidate bucket name, e.g.
        ``managed-velero-backups-0f8fad5b-d9cb-469f-a165-70867728950e``.
    """
    return prefix + str(uuid.uuid4())
