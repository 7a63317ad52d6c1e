#!/usr/bin/env python

"""
    kitchen_service.py:
    Kitchen CDK stack which deploys one container image based Lambda
    function per kitchen service. The ECR repository details are read
    from the SSM parameters exported by the kitchen-infra stack.

    Run client/cli_resolve_image_digests.py before deploying so that
    the functions are pinned to image digests.
"""

from typing import Optional

import aws_cdk as cdk
from aws_cdk import aws_ssm as ssm
from constructs import Construct
from images.reference_loader import ImageReferenceLoader
from stacks.service.container_function import ContainerFunction
from utils.CdkConstants import CdkConstants
from utils.CdkUtils import CdkUtils


class KitchenServiceStack(cdk.Stack):
    """
        Kitchen CDK stack which deploys one container image based Lambda
        function per kitchen service.
    """

    def __init__(
            self,
            scope: Construct,
            construct_id: str,
            reference_loader: Optional[ImageReferenceLoader] = None,
            **kwargs
        ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        config = CdkUtils.get_project_settings()

        if reference_loader is None:
            reference_loader = ImageReferenceLoader(CdkUtils.get_manifest_path())

        parameter_prefix = config["ecr"]["parameterPrefix"]

        self.functions = {}

        for service in config["images"]["services"]:

            ##########################################################
            # <START> Import ECR repository details
            ##########################################################

            repository_arn = ssm.StringParameter.value_for_string_parameter(
                self,
                CdkConstants.ECR_PARAMETER_ARN.format(prefix=parameter_prefix, service=service)
            )

            repository_name = ssm.StringParameter.value_for_string_parameter(
                self,
                CdkConstants.ECR_PARAMETER_NAME.format(prefix=parameter_prefix, service=service)
            )

            ##########################################################
            # </END> Import ECR repository details
            ##########################################################

            lambda_config = config["lambdas"][service]

            container_function = ContainerFunction(
                self,
                f"{service}-lambda",
                service=service,
                repository_arn=repository_arn,
                repository_name=repository_name,
                reference_loader=reference_loader,
                memory_size=lambda_config["memorySize"],
                timeout_seconds=lambda_config["timeoutSeconds"],
                log_retention=lambda_config["logRetention"]
            )

            self.functions[service] = container_function.function

            cdk.CfnOutput(
                self,
                id=f"{service}-function-arn-output",
                value=container_function.function.function_arn,
                description=f"{service.capitalize()} Lambda function ARN"
            ).override_logical_id(CdkConstants.FUNCTION_ARN.format(service=service))

            cdk.CfnOutput(
                self,
                id=f"{service}-image-reference-output",
                value=container_function.image_reference,
                description=f"{service.capitalize()} image digest or tag"
            ).override_logical_id(CdkConstants.FUNCTION_IMAGE_REFERENCE.format(service=service))
