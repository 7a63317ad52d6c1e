#!/usr/bin/env python

"""
    registry.py:
    Provides read only access to the Amazon ECR image registry used by
    the digest resolver.
"""

import logging
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError

from images.exceptions import RegistryCredentialsError

logger = logging.getLogger()
logger.setLevel(logging.DEBUG)

DEFAULT_TIMEOUT_SECONDS = 5.0

NOT_FOUND_ERROR_CODES = [
    "ImageNotFoundException",
    "RepositoryNotFoundException"
]


class EcrRegistry:
    """Looks up image digests in Amazon ECR."""

    def __init__(
            self,
            region: Optional[str] = None,
            timeout: float = DEFAULT_TIMEOUT_SECONDS,
            ecr_client=None,
            sts_client=None
        ) -> None:
        config = Config(
            connect_timeout=timeout,
            read_timeout=timeout,
            retries=dict(
                total_max_attempts=1
            )
        )
        self.timeout = timeout
        self.ecr_client = ecr_client or boto3.client("ecr", region_name=region, config=config)
        self.sts_client = sts_client or boto3.client("sts", region_name=region, config=config)

    def verify_credentials(self) -> str:
        """Returns the caller account id or raises RegistryCredentialsError."""
        try:
            identity = self.sts_client.get_caller_identity()
        except NoCredentialsError as e:
            raise RegistryCredentialsError("AWS credentials not configured") from e
        except (ClientError, BotoCoreError) as e:
            raise RegistryCredentialsError(f"AWS credentials are not usable: {e}") from e

        logger.debug(f"Using AWS account {identity['Account']}")
        return identity["Account"]

    def describe_image(self, repository: str, tag: str) -> Optional[str]:
        """
            Returns the digest of repository:tag, or None when the registry
            has no such image. Other registry failures propagate.
        """
        try:
            response = self.ecr_client.describe_images(
                repositoryName=repository,
                imageIds=[
                    {
                        "imageTag": tag
                    }
                ]
            )
        except ClientError as e:
            if e.response["Error"]["Code"] in NOT_FOUND_ERROR_CODES:
                logger.debug(f"{repository}:{tag}: {e.response['Error']['Code']}")
                return None
            raise

        image_details = response.get("imageDetails", [])
        if not image_details:
            return None

        return image_details[0].get("imageDigest")
