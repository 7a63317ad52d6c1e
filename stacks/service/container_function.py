#!/usr/bin/env python

"""
    container_function.py:
    Construct which deploys a container image based Lambda function from
    an existing ECR repository, pinned to the image reference resolved
    for the service.
"""

import aws_cdk as cdk
from aws_cdk import aws_ecr as ecr
from aws_cdk import aws_iam as iam
from aws_cdk import aws_lambda
from aws_cdk import aws_logs as logs
from constructs import Construct
from images.reference_loader import ImageReferenceLoader
from utils.IAMPrincipals import IAMPrincipals


class ContainerFunction(Construct):
    """
        Container image based Lambda function of a kitchen service.
    """

    def __init__(
            self,
            scope: Construct,
            id: str,
            service: str,
            repository_arn: str,
            repository_name: str,
            reference_loader: ImageReferenceLoader,
            memory_size: int,
            timeout_seconds: int,
            log_retention: str
        ) -> None:
        super().__init__(scope, id)

        # digest from the image manifest, <SERVICE>_IMAGE_TAG or latest
        self.image_reference = reference_loader.resolve(service)

        repository = ecr.Repository.from_repository_attributes(
            self,
            f"{service}-repository",
            repository_arn=repository_arn,
            repository_name=repository_name
        )

        role = iam.Role(
            scope=self,
            id=f"{service}-execution-role",
            assumed_by=IAMPrincipals.LAMBDA.value,
            managed_policies=[
                iam.ManagedPolicy.from_aws_managed_policy_name(
                    "service-role/AWSLambdaBasicExecutionRole"
                )
            ]
        )

        log_group = logs.LogGroup(
            self,
            f"{service}-log-group",
            log_group_name=f"/aws/lambda/{service}",
            removal_policy=cdk.RemovalPolicy.DESTROY,
            retention=getattr(logs.RetentionDays, log_retention)
        )

        self.function = aws_lambda.DockerImageFunction(
            self,
            f"{service}-function",
            function_name=service,
            code=aws_lambda.DockerImageCode.from_ecr(
                repository,
                tag_or_digest=self.image_reference
            ),
            role=role,
            memory_size=memory_size,
            timeout=cdk.Duration.seconds(timeout_seconds),
            log_group=log_group
        )
