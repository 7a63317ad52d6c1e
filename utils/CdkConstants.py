class CdkConstants():

    ### STACK NAMES ###
    INFRA_STACK_NAME = "kitchen-infra"
    SERVICE_STACK_NAME = "kitchen"

    ### KITCHEN-INFRA STACK OUTPUT NAMES ###
    ECR_REPOSITORY_URI = "{service}RepositoryUri"

    ### KITCHEN STACK OUTPUT NAMES ###
    FUNCTION_ARN = "{service}FunctionArn"
    FUNCTION_IMAGE_REFERENCE = "{service}ImageReference"

    ### SSM PARAMETER NAMES ###
    ECR_PARAMETER_ARN = "{prefix}/{service}/arn"
    ECR_PARAMETER_URI = "{prefix}/{service}/uri"
    ECR_PARAMETER_NAME = "{prefix}/{service}/name"
