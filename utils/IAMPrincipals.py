from enum import Enum

import aws_cdk as cdk
from aws_cdk import aws_iam as iam


class IAMPrincipals(Enum):
    LAMBDA: iam.IPrincipal = iam.ServicePrincipal(service=f'lambda.{cdk.Aws.URL_SUFFIX}')
