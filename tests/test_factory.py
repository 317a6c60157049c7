from typing import get_args
from unittest.mock import patch, MagicMock
import pytest
from google.api_core.exceptions import NotFound

from bucketforge.factory import _DRIVER_REGISTRY, select_driver
from bucketforge.aws.driver import Driver as AWSDriver
from bucketforge.gcp.driver import Driver as GCPDriver
from bucketforge.base import (
    HardeningOptions,
    PassOutcome,
    PlatformDescriptor,
    StorageDriverBlueprint,
    StorageRequest,
)
from bucketforge.base.config import CONFIG_REGISTRY, ConvergenceSettings
from bucketforge.base.exceptions import UnsupportedPlatformError
from bucketforge.base.platforms import supported_platforms
from bucketforge.base.logger import BucketforgeLogger

GCP_INFRA = {"type": "GCP", "gcp": {"projectID": "my-project", "region": "us-central1"}}
AWS_INFRA = {"type": "AWS", "aws": {"region": "eu-west-1"}}
AWS_CREDS = {"aws_access_key_id": "k", "aws_secret_access_key": "s"}


class TestSelectDriver:
    @patch("bucketforge.gcp.storage.gcs")
    def test_gcp(self, mock_gcs, status_writer):
        mock_gcs.Client.return_value = MagicMock()
        driver = select_driver(GCP_INFRA, status_writer)
        assert isinstance(driver, GCPDriver)
        assert isinstance(driver, StorageDriverBlueprint)
        assert driver.platform_type == "GCP"
        mock_gcs.Client.assert_called_once_with(project="my-project", credentials=None)

    @patch("bucketforge.aws.storage.boto3")
    def test_aws(self, mock_boto, status_writer):
        mock_boto.client.return_value = MagicMock()
        driver = select_driver(AWS_INFRA, status_writer, AWS_CREDS)
        assert isinstance(driver, AWSDriver)
        assert driver.platform_type == "AWS"
        assert mock_boto.client.call_args.kwargs["region_name"] == "eu-west-1"

    @patch("bucketforge.aws.storage.boto3")
    def test_accepts_descriptor_model(self, mock_boto, status_writer):
        driver = select_driver(PlatformDescriptor.model_validate(AWS_INFRA), status_writer, AWS_CREDS)
        assert driver.engine.location == "eu-west-1"

    @patch("bucketforge.gcp.storage.gcs")
    def test_settings_are_injected(self, mock_gcs, status_writer):
        settings = ConvergenceSettings(bucket_prefix="custom-", call_timeout=3)
        driver = select_driver(GCP_INFRA, status_writer, settings=settings)
        assert driver.engine.settings.bucket_prefix == "custom-"
        assert driver.client.timeout == 3

    def test_unsupported_platform(self, status_writer):
        with pytest.raises(UnsupportedPlatformError, match="Unsupported platform: Azure"):
            select_driver({"type": "Azure"}, status_writer)
        assert status_writer.persisted == []

    def test_unsupported_platform_is_value_error(self, status_writer):
        with pytest.raises(ValueError):
            select_driver({"type": "None"}, status_writer)

    def test_missing_platform_details(self, status_writer):
        with pytest.raises(ValueError, match="missing its 'gcp' details"):
            select_driver({"type": "GCP"}, status_writer)

    def test_registries_cover_supported_platforms(self):
        platforms = set(get_args(supported_platforms))
        assert set(_DRIVER_REGISTRY) == platforms
        assert set(CONFIG_REGISTRY) == platforms


class TestDrivers:
    def test_required_hardening(self):
        assert GCPDriver.required_hardening == HardeningOptions(
            uniform_access=True, block_public_access=False
        )
        assert AWSDriver.required_hardening == HardeningOptions(
            uniform_access=True, block_public_access=True
        )

    @patch("bucketforge.gcp.storage.gcs")
    def test_storage_exists(self, mock_gcs, status_writer):
        client = MagicMock()
        mock_gcs.Client.return_value = client
        driver = select_driver(GCP_INFRA, status_writer)
        client.get_bucket.side_effect = NotFound("bucket not found")
        assert driver.storage_exists("missing") is False

    @patch("bucketforge.gcp.storage.gcs")
    def test_create_storage_runs_a_pass(self, mock_gcs, status_writer):
        client = MagicMock()
        mock_gcs.Client.return_value = client
        client.get_bucket.side_effect = NotFound("bucket not found")
        driver = select_driver(GCP_INFRA, status_writer)

        request = StorageRequest(name="cluster")
        outcome = driver.create_storage(BucketforgeLogger("test_driver"), request)

        assert outcome is PassOutcome.NAME_ASSIGNED
        assert request.status.name.startswith("managed-velero-backups-")
        assert status_writer.persisted == [request.status]
        client.create_bucket.assert_not_called()

    @patch("bucketforge.aws.storage.boto3")
    def test_aws_create_storage_hardens_new_bucket(self, mock_boto, status_writer):
        client = MagicMock()
        mock_boto.client.return_value = client
        client.get_bucket_location.return_value = {"LocationConstraint": "eu-west-1"}
        client.get_bucket_ownership_controls.return_value = {
            "OwnershipControls": {"Rules": [{"ObjectOwnership": "BucketOwnerEnforced"}]}
        }
        client.get_public_access_block.return_value = {
            "PublicAccessBlockConfiguration": {
                "BlockPublicAcls": True,
                "IgnorePublicAcls": True,
                "BlockPublicPolicy": True,
                "RestrictPublicBuckets": True,
            }
        }
        driver = select_driver(AWS_INFRA, status_writer, AWS_CREDS)
        request = StorageRequest.model_validate(
            {"name": "cluster", "status": {"name": "managed-velero-backups-abc"}}
        )

        outcome = driver.create_storage(BucketforgeLogger("test_driver"), request)

        assert outcome is PassOutcome.CONVERGED
        assert request.status.provisioned is True
        client.create_bucket.assert_called_once_with(
            Bucket="managed-velero-backups-abc",
            CreateBucketConfiguration={"LocationConstraint": "eu-west-1"},
            ObjectOwnership="BucketOwnerEnforced",
        )
        client.put_public_access_block.assert_called_once()
        client.put_bucket_ownership_controls.assert_not_called()
