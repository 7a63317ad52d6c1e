import aws_cdk as cdk
import boto3
import pytest

from images.reference_loader import ImageReferenceLoader
from stacks.infra.kitchen_infra import KitchenInfraStack
from stacks.service.kitchen_service import KitchenServiceStack
from tests.utils.fakes import CHEF_DIGEST, PREPPER_DIGEST, FakeRegistry, write_json
from utils.CdkConstants import CdkConstants

TEST_ENV = cdk.Environment(account="123456789012", region="eu-central-1")


@pytest.fixture
def manifest_path(tmp_path):
    return str(tmp_path / "image-manifest.json")


@pytest.fixture
def fake_registry():
    return FakeRegistry(
        images={
            ("chef", "v1"): CHEF_DIGEST,
            ("prepper", "v3.0.0"): PREPPER_DIGEST,
        }
    )


@pytest.fixture
def ecr_client():
    return boto3.client(
        "ecr",
        region_name="eu-central-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing"
    )


@pytest.fixture
def sts_client():
    return boto3.client(
        "sts",
        region_name="eu-central-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing"
    )


@pytest.fixture(scope="session")
def synth(tmp_path_factory):
    """Synthesizes both stacks in process, chef pinned by the image manifest
    and prepper by PREPPER_IMAGE_TAG."""
    manifest = tmp_path_factory.mktemp("synth") / "image-manifest.json"
    write_json(manifest, {"chef": {"tag": "v1", "digest": CHEF_DIGEST}})

    loader = ImageReferenceLoader(str(manifest), environ={"PREPPER_IMAGE_TAG": "v9"})

    app = cdk.App()
    KitchenInfraStack(app, CdkConstants.INFRA_STACK_NAME, env=TEST_ENV)
    KitchenServiceStack(app, CdkConstants.SERVICE_STACK_NAME, reference_loader=loader, env=TEST_ENV)

    return app.synth()
