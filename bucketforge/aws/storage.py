"""AWS S3 implementation of the bucket client blueprint."""

import boto3
from typing import NoReturn
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from bucketforge.base.exceptions import (
    StorageError,
    BucketNotFoundError,
    BucketAlreadyExistsError,
)
from bucketforge.base import BucketClientBlueprint, BucketAttributes, HardeningOptions
from bucketforge.base.config import AWSConfig

_ERROR_MAP = {
    "NoSuchBucket": BucketNotFoundError,
    "BucketAlreadyExists": BucketAlreadyExistsError,
    "BucketAlreadyOwnedByYou": BucketAlreadyExistsError,
}

# head_bucket has no body, so a missing bucket only carries the HTTP status
_NOT_FOUND_CODES = {"404", "NoSuchBucket", "NotFound"}

_OWNER_ENFORCED = "BucketOwnerEnforced"

_BLOCK_ALL_PUBLIC_ACCESS = {
    "BlockPublicAcls": True,
    "IgnorePublicAcls": True,
    "BlockPublicPolicy": True,
    "RestrictPublicBuckets": True,
}

# us-east-1 is the default region and must not be sent as a LocationConstraint
_DEFAULT_REGION = "us-east-1"


def _error_code(e: ClientError) -> str:
    return e.response.get("Error", {}).get("Code", "")


def _handle_client_error(e: Exception, message: str) -> NoReturn:
    """Raise a mapped exception or a generic StorageError."""
    exc_class = _ERROR_MAP.get(_error_code(e)) if isinstance(e, ClientError) else None
    raise (exc_class or StorageError)(message) from e


class Storage(BucketClientBlueprint):
    """AWS S3 bucket client, also usable against S3-compatible endpoints.

    Hardening maps to S3 as follows: ``uniform_access`` disables object
    ACLs (Object Ownership ``BucketOwnerEnforced``) and
    ``block_public_access`` turns on all four public access block settings.

    Attributes:
        client: boto3 S3 client for interacting with the AWS S3 API.
        region: AWS region name.
    """

    def __init__(self, config: AWSConfig, timeout: float = 60.0) -> None:
        """Initialize the AWS S3 client.

        Args:
            config: AWS configuration object containing credentials, region
                and an optional custom endpoint.
            timeout: Connect and read timeout in seconds for every call.
        """
        self.client = boto3.client(
            "s3",
            aws_access_key_id=config.aws_access_key_id,
            aws_secret_access_key=config.aws_secret_access_key,
            region_name=config.region_name,
            endpoint_url=config.endpoint_url,
            config=Config(connect_timeout=timeout, read_timeout=timeout),
        )
        self.region = config.region_name

    def bucket_exists(self, bucket_name: str) -> bool:
        """Check bucket existence with ``HeadBucket``.

        A 403 means the name exists but belongs to someone else; like every
        other failure it is raised rather than read as "absent".
        """
        try:
            self.client.head_bucket(Bucket=bucket_name)
        except ClientError as e:
            if _error_code(e) in _NOT_FOUND_CODES:
                return False
            _handle_client_error(e, f"Failed to check whether bucket '{bucket_name}' exists.")
        except BotoCoreError as e:
            _handle_client_error(e, f"Failed to check whether bucket '{bucket_name}' exists.")
        return True

    def create_bucket(
        self, bucket_name: str, location: str | None, hardening: HardeningOptions
    ) -> None:
        """Create an S3 bucket in *location* with ACLs and public access locked down.

        Raises:
            BucketAlreadyExistsError: If the bucket already exists.
            StorageError: If creation fails for any other reason.
        """
        region = location or self.region
        params: dict = {"Bucket": bucket_name}
        if region and region != _DEFAULT_REGION:
            params["CreateBucketConfiguration"] = {"LocationConstraint": region}
        if hardening.uniform_access:
            params["ObjectOwnership"] = _OWNER_ENFORCED
        try:
            self.client.create_bucket(**params)
        except (ClientError, BotoCoreError) as e:
            _handle_client_error(e, f"Failed to create bucket '{bucket_name}'.")

        if hardening.block_public_access:
            self._block_public_access(bucket_name)

    def get_attributes(self, bucket_name: str) -> BucketAttributes:
        """Read region, object ownership and public access block of a bucket.

        Raises:
            BucketNotFoundError: If the bucket does not exist.
            StorageError: If any lookup fails.
        """
        message = f"Failed to retrieve attributes of bucket '{bucket_name}'."
        try:
            location = self.client.get_bucket_location(Bucket=bucket_name).get("LocationConstraint")
            uniform_access = self._owner_enforced(bucket_name)
            public_access_blocked = self._public_access_blocked(bucket_name)
        except (ClientError, BotoCoreError) as e:
            _handle_client_error(e, message)
        return BucketAttributes(
            name=bucket_name,
            location=location or _DEFAULT_REGION,
            uniform_access=uniform_access,
            public_access_blocked=public_access_blocked,
        )

    def update_attributes(self, bucket_name: str, patch: HardeningOptions) -> None:
        """Enable object-ownership enforcement and/or the public access block."""
        if patch.uniform_access:
            try:
                self.client.put_bucket_ownership_controls(
                    Bucket=bucket_name,
                    OwnershipControls={"Rules": [{"ObjectOwnership": _OWNER_ENFORCED}]},
                )
            except (ClientError, BotoCoreError) as e:
                _handle_client_error(
                    e, f"Failed to enforce object ownership on bucket '{bucket_name}'."
                )
        if patch.block_public_access:
            self._block_public_access(bucket_name)

    # --- Helpers ---

    def _block_public_access(self, bucket_name: str) -> None:
        try:
            self.client.put_public_access_block(
                Bucket=bucket_name,
                PublicAccessBlockConfiguration=dict(_BLOCK_ALL_PUBLIC_ACCESS),
            )
        except (ClientError, BotoCoreError) as e:
            _handle_client_error(e, f"Failed to block public access on bucket '{bucket_name}'.")

    def _owner_enforced(self, bucket_name: str) -> bool:
        try:
            response = self.client.get_bucket_ownership_controls(Bucket=bucket_name)
        except ClientError as e:
            if _error_code(e) == "OwnershipControlsNotFoundError":
                return False
            raise
        rules = response.get("OwnershipControls", {}).get("Rules", [])
        return any(rule.get("ObjectOwnership") == _OWNER_ENFORCED for rule in rules)

    def _public_access_blocked(self, bucket_name: str) -> bool:
        try:
            response = self.client.get_public_access_block(Bucket=bucket_name)
        except ClientError as e:
            if _error_code(e) == "NoSuchPublicAccessBlockConfiguration":
                return False
            raise
        block = response.get("PublicAccessBlockConfiguration", {})
        return all(block.get(key) is True for key in _BLOCK_ALL_PUBLIC_ACCESS)
