#!/usr/bin/env python

"""
    kitchen_infra.py:
    Kitchen CDK stack which creates the ECR repositories of the kitchen
    services and exports the repository details to SSM Parameter Store
    so that other stacks can consume them without a direct dependency.
"""

import aws_cdk as cdk
from aws_cdk import aws_ecr as ecr
from aws_cdk import aws_ssm as ssm
from constructs import Construct
from utils.CdkConstants import CdkConstants
from utils.CdkUtils import CdkUtils


class KitchenInfraStack(cdk.Stack):
    """
        Kitchen CDK stack which creates the ECR repositories of the kitchen
        services and exports the repository details to SSM Parameter Store.
    """

    def __init__(self, scope: Construct, construct_id: str, **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)

        config = CdkUtils.get_project_settings()

        services = config["images"]["services"]
        max_image_count = config["ecr"]["maxImageCount"]
        untagged_expiration = config["ecr"]["untaggedImageExpirationDays"]
        parameter_prefix = config["ecr"]["parameterPrefix"]

        ##################################################
        ## <START> ECR repositories
        ##################################################

        lifecycle_rules = [
            ecr.LifecycleRule(
                description=f"Delete untagged images after {untagged_expiration} day(s)",
                rule_priority=1,
                tag_status=ecr.TagStatus.UNTAGGED,
                max_image_age=cdk.Duration.days(untagged_expiration)
            ),
            ecr.LifecycleRule(
                description=f"Keep only {max_image_count} images",
                rule_priority=2,
                tag_status=ecr.TagStatus.ANY,
                max_image_count=max_image_count
            )
        ]

        self.repositories = {}

        for service in services:
            self.repositories[service] = ecr.Repository(
                self,
                f"{service}-repository",
                repository_name=service,
                image_scan_on_push=False,
                lifecycle_rules=lifecycle_rules,
                removal_policy=cdk.RemovalPolicy.DESTROY
            )

        ##################################################
        ## </END> ECR repositories
        ##################################################


        ##################################################
        ## <START> Export values for consumption
        ## by other stacks
        ##################################################

        for service, repository in self.repositories.items():
            ssm.StringParameter(
                self,
                f"{service}-repository-arn",
                parameter_name=CdkConstants.ECR_PARAMETER_ARN.format(prefix=parameter_prefix, service=service),
                string_value=repository.repository_arn,
                description=f"{service.capitalize()} ECR Repository ARN",
                tier=ssm.ParameterTier.STANDARD
            )

            ssm.StringParameter(
                self,
                f"{service}-repository-uri",
                parameter_name=CdkConstants.ECR_PARAMETER_URI.format(prefix=parameter_prefix, service=service),
                string_value=repository.repository_uri,
                description=f"{service.capitalize()} ECR Repository URI",
                tier=ssm.ParameterTier.STANDARD
            )

            ssm.StringParameter(
                self,
                f"{service}-repository-name",
                parameter_name=CdkConstants.ECR_PARAMETER_NAME.format(prefix=parameter_prefix, service=service),
                string_value=repository.repository_name,
                description=f"{service.capitalize()} ECR Repository Name",
                tier=ssm.ParameterTier.STANDARD
            )

        ##################################################
        ## </END> Export values for consumption
        ## by other stacks
        ##################################################


        ##################################################
        ## <START> CDK Outputs
        ##################################################

        for service, repository in self.repositories.items():
            cdk.CfnOutput(
                self,
                id=f"{service}-repository-uri-output",
                value=repository.repository_uri,
                description=f"{service.capitalize()} ECR Repository URI"
            ).override_logical_id(CdkConstants.ECR_REPOSITORY_URI.format(service=service))

        ##################################################
        ## </END> CDK Outputs
        ##################################################
