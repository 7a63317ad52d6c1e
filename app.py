#!/usr/bin/env python3
import os

import aws_cdk as cdk

from stacks.infra.kitchen_infra import KitchenInfraStack
from stacks.service.kitchen_service import KitchenServiceStack
from utils.CdkConstants import CdkConstants

app = cdk.App()

env = cdk.Environment(account=os.getenv('CDK_DEFAULT_ACCOUNT'), region=os.getenv('CDK_DEFAULT_REGION'))

# ECR repositories, deploy this first to create the repositories
KitchenInfraStack(
    app,
    CdkConstants.INFRA_STACK_NAME,
    env=env,
    description="Kitchen ECR repositories and shared infrastructure"
)

# Lambda functions, reads the ECR details from SSM.
# Run client/cli_resolve_image_digests.py before deploying.
KitchenServiceStack(
    app,
    CdkConstants.SERVICE_STACK_NAME,
    env=env,
    description="Kitchen Lambda functions"
)

app.synth()
